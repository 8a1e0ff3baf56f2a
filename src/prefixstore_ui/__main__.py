from __future__ import annotations
import argparse, json, logging
from typing import Callable, Dict
from prefixstore import PrefixStoreError, RecordStore
from prefixstore.config import DEFAULT_DSN, VERBOSE
from . import Session

MENU = """
1. Insert Word
2. Retrieve Word
3. Update Word
4. Delete Word
5. Display Stored Words
6. Display Saved Addresses
7. Save
8. Load
9. Exit"""


def _print_dump(store: RecordStore, as_json: bool) -> None:
    data = store.dump()
    if as_json:
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return
    if not data:
        print("(empty)"); return
    for key, recs in data.items():
        print(f"{key!r:<12} " + ", ".join(f"{r['id']}:{r['text']}" for r in recs))


def _print_addresses(store: RecordStore, as_json: bool) -> None:
    rows = list(store.records())
    if as_json:
        print(json.dumps([{"address": a, "text": t} for a, t in rows], ensure_ascii=False, indent=2))
        return
    if not rows:
        print("(no addresses)"); return
    print("Address          Text")
    for a, t in rows:
        print(f"{a:<16} {t}")


def repl(session: Session, *, as_json: bool = False) -> None:
    """Numbered menu loop; errors are printed and the loop keeps going."""
    # only the menu choice is trimmed; keys and texts may start or end with spaces
    def do_insert() -> None:
        print("Inserted at:", session.store.insert(input("Enter word to insert: ")))

    def do_get() -> None:
        print("Retrieved:", session.store.get(input("Enter address to retrieve: ")))

    def do_update() -> None:
        addr = input("Enter address to update: ")
        print("Updated Address:", session.store.update(addr, input("Enter new word: ")))

    def do_delete() -> None:
        print("Deleted:", session.store.delete(input("Enter address to delete: ")))

    def do_save() -> None:
        session.save(); print("Data saved.")

    def do_load() -> None:
        session.reload(); print("Data loaded.")

    store_ops: Dict[str, Callable[[], None]] = {
        "1": do_insert, "2": do_get, "3": do_update, "4": do_delete,
        "5": lambda: _print_dump(session.store, as_json),
        "6": lambda: _print_addresses(session.store, as_json),
        "7": do_save, "8": do_load,
    }

    while True:
        print(MENU)
        try:
            choice = input("Enter your choice: ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if choice == "9":
            break
        op = store_ops.get(choice)
        if op is None:
            print("Invalid choice, try again."); continue
        try:
            op()
        except PrefixStoreError as exc:
            print(f"error: {exc}")
        except (EOFError, KeyboardInterrupt):
            break


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Prefix-indexed record store CLI")
    p.add_argument("--db", default=DEFAULT_DSN,
                   help="Snapshot DSN: json:///path, sqlite:///path or memory://")
    p.add_argument("--strategy", default=None, help='Bucketing: "flat", "flat:<n>" or "trie"')
    p.add_argument("--width", type=int, default=None, help="Prefix width; only valid with a bare --strategy flat")

    g = p.add_mutually_exclusive_group()
    g.add_argument("--insert", metavar="TEXT", help="Insert TEXT and print its address")
    g.add_argument("--get", metavar="ADDR", help="Print the text stored at ADDR")
    g.add_argument("--update", nargs=2, metavar=("ADDR", "TEXT"), help="Replace the text at ADDR")
    g.add_argument("--delete", metavar="ADDR", help="Delete the record at ADDR")
    g.add_argument("--dump", action="store_true", help="Display stored words by bucket")
    g.add_argument("--addresses", action="store_true", help="Display all live addresses")
    g.add_argument("--stats", action="store_true", help="Display index statistics")
    g.add_argument("--repl", action="store_true", help="Interactive menu loop")

    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)
    if args.width is not None and (args.strategy or "").strip().lower() != "flat":
        p.error("--width only applies with --strategy flat")
    if args.verbose or VERBOSE:
        logging.basicConfig(level=logging.INFO)

    try:
        session = Session.open(args.db, strategy=args.strategy, width=args.width)
    except (PrefixStoreError, ValueError) as exc:
        print(f"error: {exc}")
        return 1

    store = session.store
    try:
        if args.insert is not None:
            addr = store.insert(args.insert)
            session.save()
            print(json.dumps({"address": addr}) if args.json else addr)
        elif args.get is not None:
            text = store.get(args.get)
            print(json.dumps({"address": args.get, "text": text}, ensure_ascii=False) if args.json else text)
        elif args.update is not None:
            addr = store.update(*args.update)
            session.save()
            print(json.dumps({"address": addr}) if args.json else addr)
        elif args.delete is not None:
            removed = store.delete(args.delete)
            if removed:
                session.save()
            print(json.dumps({"deleted": removed}) if args.json else str(removed).lower())
        elif args.dump:
            _print_dump(store, args.json)
        elif args.addresses:
            _print_addresses(store, args.json)
        elif args.stats:
            print(json.dumps(store.stats(), indent=2))
        elif args.repl:
            repl(session, as_json=args.json)
        else:
            p.print_help()
        return 0
    except PrefixStoreError as exc:
        print(f"error: {exc}")
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
