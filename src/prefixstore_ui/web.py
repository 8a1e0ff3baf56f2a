from __future__ import annotations
import argparse
import logging
import threading
from flask import Flask, request, jsonify, Response
from werkzeug.routing import PathConverter
from prefixstore import (
    CorruptSnapshot, InvalidInput, InvalidKey, MalformedAddress, NotFound, PrefixStoreError,
)
from prefixstore.config import DEFAULT_DSN, VERBOSE
from . import Session


class AddressConverter(PathConverter):
    # trie addresses carry the whole text, which may itself start with "/"
    regex = ".+"
    part_isolating = False


app = Flask(__name__)
app.url_map.converters["address"] = AddressConverter
_session: Session | None = None
_lock = threading.Lock()   # the store is single-writer; one request at a time

log = logging.getLogger(__name__)

_STATUS = {
    InvalidInput: 400,
    InvalidKey: 400,
    MalformedAddress: 400,
    CorruptSnapshot: 400,
    NotFound: 404,
}


@app.errorhandler(PrefixStoreError)
def _store_error(exc: PrefixStoreError):
    status = next((code for cls, code in _STATUS.items() if isinstance(exc, cls)), 500)
    return jsonify({"ok": False, "error": type(exc).__name__, "message": str(exc)}), status


@app.errorhandler(OSError)
def _save_error(exc: OSError):
    # the in-memory store already holds the change; only the backend write failed
    log.error("backend save failed: %s", exc)
    return jsonify({
        "ok": False,
        "error": "StorageError",
        "message": f"change applied in memory but not saved: {exc}",
    }), 500


def _text_from_body() -> object:
    body = request.get_json(silent=True)
    return body.get("text") if isinstance(body, dict) else None


# ---------- API ----------
@app.get("/health")
def health():
    return jsonify({"ok": _session is not None})


@app.get("/api/records")
def api_list():
    with _lock:
        rows = [{"address": a, "text": t} for a, t in _session.store.records()]  # type: ignore
    return jsonify(rows)


@app.post("/api/records")
def api_insert():
    text = _text_from_body()
    with _lock:
        addr = _session.store.insert(text)  # type: ignore
        _session.save()  # type: ignore
    return jsonify({"ok": True, "address": addr, "text": text}), 201


@app.get("/api/records/<address:address>", merge_slashes=False)
def api_get(address: str):
    with _lock:
        text = _session.store.get(address)  # type: ignore
    return jsonify({"ok": True, "address": address, "text": text})


@app.put("/api/records/<address:address>", merge_slashes=False)
def api_update(address: str):
    text = _text_from_body()
    with _lock:
        addr = _session.store.update(address, text)  # type: ignore
        _session.save()  # type: ignore
    return jsonify({"ok": True, "address": addr, "text": text})


@app.delete("/api/records/<address:address>", merge_slashes=False)
def api_delete(address: str):
    with _lock:
        removed = _session.store.delete(address)  # type: ignore
        if removed:
            _session.save()  # type: ignore
    return jsonify({"ok": True, "deleted": removed})


@app.get("/api/snapshot")
def api_snapshot():
    with _lock:
        snap = _session.store.snapshot()  # type: ignore
    return jsonify(snap)


@app.get("/api/stats")
def api_stats():
    with _lock:
        stats = _session.store.stats()  # type: ignore
    return jsonify(stats)


# ---------- UI ----------
@app.get("/")
def home():
    # Single page, no external deps: insert/get/update/delete against the JSON API.
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Prefix Store • Flask UI</title>
<style>
:root{ --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6; --accent:#6ee7ff; --border:#1c2530; }
*{box-sizing:border-box}
body{ margin:0; background:var(--bg); color:var(--ink);
  font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,"Helvetica Neue",Arial; }
.container{ max-width:860px; margin:24px auto; padding:0 16px; }
.card{ background:var(--panel); border:1px solid var(--border); border-radius:16px; padding:18px; }
h1{ font-size:20px; margin:0 0 8px 0; }
form{ display:flex; gap:10px; flex-wrap:wrap; margin:10px 0; }
input{ flex:1; min-width:180px; padding:10px 12px; border-radius:10px; border:1px solid var(--border);
  background:#0b1117; color:var(--ink); }
button{ padding:10px 14px; border-radius:10px; border:1px solid var(--border); background:#0b1117;
  color:var(--ink); cursor:pointer; }
button:hover{ border-color:var(--accent) }
pre{ background:#0b1117; border:1px solid var(--border); border-radius:10px; padding:12px;
  color:var(--muted); white-space:pre-wrap; }
</style>
</head>
<body>
<div class="container"><div class="card">
  <h1>Prefix Store</h1>
  <form id="f" onsubmit="return false">
    <input id="text" placeholder="text" />
    <input id="addr" placeholder="address (e.g. ba_1)" />
  </form>
  <form onsubmit="return false">
    <button data-op="insert">Insert</button>
    <button data-op="get">Retrieve</button>
    <button data-op="update">Update</button>
    <button data-op="delete">Delete</button>
    <button data-op="list">Addresses</button>
  </form>
  <pre id="out">Ready.</pre>
</div></div>
<script>
const $ = (id) => document.getElementById(id);
const enc = (a) => a.split("/").map(encodeURIComponent).join("/");
async function call(op){
  const text = $("text").value, addr = $("addr").value;
  const json = {"Content-Type":"application/json"};
  let r;
  if(op === "insert") r = await fetch("/api/records", {method:"POST", headers:json, body:JSON.stringify({text})});
  else if(op === "get") r = await fetch("/api/records/" + enc(addr));
  else if(op === "update") r = await fetch("/api/records/" + enc(addr), {method:"PUT", headers:json, body:JSON.stringify({text})});
  else if(op === "delete") r = await fetch("/api/records/" + enc(addr), {method:"DELETE"});
  else r = await fetch("/api/records");
  const data = await r.json();
  if(data && data.address) $("addr").value = data.address;
  $("out").textContent = JSON.stringify(data, null, 2);
}
document.querySelectorAll("button[data-op]").forEach(b => b.addEventListener("click", () => call(b.dataset.op)));
</script>
</body>
</html>
"""
    return Response(html, mimetype="text/html")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run Flask UI on top of RecordStore")
    ap.add_argument("--db", dest="db", default=DEFAULT_DSN)  # DSN: json:///, sqlite:/// or memory://
    ap.add_argument("--strategy", default=None)
    ap.add_argument("--width", type=int, default=None, help="Prefix width; only valid with --strategy flat")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)
    if args.width is not None and (args.strategy or "").strip().lower() != "flat":
        ap.error("--width only applies with --strategy flat")

    if args.verbose or VERBOSE:
        logging.basicConfig(level=logging.INFO)

    global _session
    _session = Session.open(args.db, strategy=args.strategy, width=args.width)
    log.info("Serving %s on http://%s:%d", _session.dsn, args.host, args.port)
    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _session.close()
        _session = None
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
