# app.py
# CustomTkinter GUI for the prefix store (dark theme).
# - Opens a snapshot backend from a DSN (json:///, sqlite:///, memory://).
# - Insert / Retrieve / Update / Delete buttons over one RecordStore.
# - Stored words view and event log panes.

from __future__ import annotations
import json
from typing import Callable, Optional

import tkinter.messagebox as mb
import customtkinter as ctk

# Project imports (pip install -e . or PYTHONPATH=src)
from prefixstore import PrefixStoreError
from prefixstore.config import DEFAULT_DSN
from prefixstore_ui import Session


# -------------------- small helpers --------------------

def shorten(s: str, max_chars: int = 60) -> str:
    """Shorten long DSNs neatly for labels."""
    if len(s) <= max_chars:
        return s
    keep = max_chars // 2 - 3
    return s[:keep] + "..." + s[-keep:]


# -------------------- main app --------------------

class PrefixStoreApp(ctk.CTk):
    """Dark-themed GUI over one Session (store + backend)."""

    def __init__(self, dsn: str = DEFAULT_DSN) -> None:
        super().__init__()

        # Theme
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        # Window
        self.title("Prefix Store")
        self.geometry("900x650")
        self.minsize(820, 560)

        # State
        self._session: Optional[Session] = None

        # Fonts
        self.font_title = ctk.CTkFont(size=18, weight="bold")
        self.font_label = ctk.CTkFont(size=13)
        self.font_mono = ctk.CTkFont(family="Cascadia Mono, Menlo, Consolas, Courier New", size=13)

        # Layout grid
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)  # stored words
        self.grid_rowconfigure(4, weight=1)  # log

        # Build UI
        self._build_header()
        self._build_source_bar(dsn)
        self._build_editor()
        self._build_words()
        self._build_log()

        self._open(dsn)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # --------- UI sections ---------

    def _build_header(self) -> None:
        header = ctk.CTkFrame(self, corner_radius=10)
        header.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 6))
        header.grid_columnconfigure(0, weight=1)

        title = ctk.CTkLabel(header, text="Prefix Store", font=self.font_title)
        title.grid(row=0, column=0, sticky="w", padx=12, pady=10)

    def _build_source_bar(self, dsn: str) -> None:
        bar = ctk.CTkFrame(self, corner_radius=10)
        bar.grid(row=1, column=0, sticky="ew", padx=12, pady=6)
        bar.grid_columnconfigure(0, weight=1)

        self.entry_dsn = ctk.CTkEntry(bar, placeholder_text="json:///prefixstore.json")
        self.entry_dsn.insert(0, dsn)
        self.entry_dsn.grid(row=0, column=0, sticky="ew", padx=(12, 6), pady=10)

        ctk.CTkButton(bar, text="Open", width=80, command=lambda: self._open(self.entry_dsn.get())).grid(
            row=0, column=1, padx=(0, 6), pady=10
        )
        ctk.CTkButton(bar, text="Save", width=80, command=self._save).grid(row=0, column=2, padx=(0, 6), pady=10)
        ctk.CTkButton(bar, text="Load", width=80, command=self._reload).grid(row=0, column=3, padx=(0, 6), pady=10)

        self.lbl_status = ctk.CTkLabel(bar, text="Status: —", anchor="e")
        self.lbl_status.grid(row=0, column=4, sticky="e", padx=12, pady=10)

    def _build_editor(self) -> None:
        box = ctk.CTkFrame(self, corner_radius=10)
        box.grid(row=2, column=0, sticky="ew", padx=12, pady=(6, 6))
        box.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(box, text="Text:", font=self.font_label).grid(row=0, column=0, sticky="w", padx=12, pady=6)
        self.entry_text = ctk.CTkEntry(box, placeholder_text="word to insert / new text")
        self.entry_text.grid(row=0, column=1, sticky="ew", padx=(6, 12), pady=6)

        ctk.CTkLabel(box, text="Address:", font=self.font_label).grid(row=1, column=0, sticky="w", padx=12, pady=6)
        self.entry_addr = ctk.CTkEntry(box, placeholder_text="e.g. ba_1")
        self.entry_addr.grid(row=1, column=1, sticky="ew", padx=(6, 12), pady=6)

        buttons = ctk.CTkFrame(box, fg_color="transparent")
        buttons.grid(row=2, column=0, columnspan=2, sticky="w", padx=6, pady=(4, 10))
        for i, (label, fn) in enumerate((
            ("Insert", self._insert),
            ("Retrieve", self._get),
            ("Update", self._update),
            ("Delete", self._delete),
        )):
            ctk.CTkButton(buttons, text=label, width=100, command=fn).grid(row=0, column=i, padx=6)

    def _build_words(self) -> None:
        frame = ctk.CTkFrame(self, corner_radius=10)
        frame.grid(row=3, column=0, sticky="nsew", padx=12, pady=(6, 6))
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(frame, text="Stored words", font=self.font_label).grid(
            row=0, column=0, sticky="w", padx=12, pady=(10, 2)
        )
        self.txt_words = ctk.CTkTextbox(frame, wrap="none", font=self.font_mono)
        self.txt_words.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 12))
        self.txt_words.configure(state="disabled")

    def _build_log(self) -> None:
        frame = ctk.CTkFrame(self, corner_radius=10)
        frame.grid(row=4, column=0, sticky="nsew", padx=12, pady=(6, 12))
        frame.grid_columnconfigure(0, weight=1)
        frame.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(frame, text="Event log", font=self.font_label).grid(
            row=0, column=0, sticky="w", padx=12, pady=(10, 2)
        )
        self.txt_log = ctk.CTkTextbox(frame, height=110, wrap="word", font=ctk.CTkFont(size=12))
        self.txt_log.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 12))
        self._log("GUI ready.")

    # --------- backend ---------

    def _open(self, dsn: str) -> None:
        dsn = dsn.strip() or DEFAULT_DSN
        try:
            session = Session.open(dsn)
        except (PrefixStoreError, ValueError) as exc:
            self._log(f"ERROR opening {dsn}: {exc}")
            mb.showerror("Open error", f"Could not open {dsn}.\nSee event log for details.")
            return
        if self._session is not None:
            self._session.close()
        self._session = session
        self._set_status(f"{shorten(dsn, 40)} ({session.store.strategy})")
        self._log(f"Opened {dsn}: {len(session.store)} records.")
        self._refresh_words()

    def _save(self) -> None:
        self._run("save", lambda: self._session.save() or "saved")  # type: ignore[union-attr]

    def _reload(self) -> None:
        self._run("load", lambda: self._session.reload() or "loaded")  # type: ignore[union-attr]

    # --------- CRUD ---------

    def _insert(self) -> None:
        addr = self._run("insert", lambda: self._session.store.insert(self.entry_text.get()))  # type: ignore[union-attr]
        if addr:
            self._set_entry(self.entry_addr, addr)

    def _get(self) -> None:
        text = self._run("retrieve", lambda: self._session.store.get(self.entry_addr.get().strip()))  # type: ignore[union-attr]
        if text:
            self._set_entry(self.entry_text, text)

    def _update(self) -> None:
        self._run(
            "update",
            lambda: self._session.store.update(self.entry_addr.get().strip(), self.entry_text.get()),  # type: ignore[union-attr]
        )

    def _delete(self) -> None:
        self._run("delete", lambda: self._session.store.delete(self.entry_addr.get().strip()))  # type: ignore[union-attr]

    def _run(self, what: str, fn: Callable[[], object]) -> object:
        if self._session is None:
            self._log(f"{what}: no store open.")
            return None
        try:
            result = fn()
        except PrefixStoreError as exc:
            self._log(f"{what}: {type(exc).__name__}: {exc}")
            return None
        self._log(f"{what}: {result}")
        self._refresh_words()
        return result

    # --------- misc UI helpers ---------

    def _refresh_words(self) -> None:
        text = "" if self._session is None else json.dumps(
            self._session.store.dump(), ensure_ascii=False, indent=2
        )
        self.txt_words.configure(state="normal")
        self.txt_words.delete("0.0", "end")
        if text:
            self.txt_words.insert("end", text)
        self.txt_words.configure(state="disabled")

    @staticmethod
    def _set_entry(entry: ctk.CTkEntry, value: str) -> None:
        entry.delete(0, "end")
        entry.insert(0, value)

    def _set_status(self, text: str) -> None:
        self.lbl_status.configure(text=f"Status: {text}")

    def _log(self, msg: str) -> None:
        self.txt_log.insert("end", msg + "\n")
        self.txt_log.see("end")

    # --------- lifecycle ---------

    def _on_close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        self.destroy()


if __name__ == "__main__":
    app = PrefixStoreApp()
    app.mainloop()
