# src/stakelock/runtime/store.py
from __future__ import annotations

import fcntl
import json
import os
from pathlib import Path
from typing import Optional

from stakelock.ledger.state import AccountLedger
from stakelock.runtime.custody import InMemoryTokenCustody


class SingleWriterLock:
    """
    Enforces a single-process writer for a JSON-backed ledger file.
    Uses a filesystem lock (Linux / WSL / macOS).
    """

    def __init__(self, path: str):
        self.path = path
        self._fd = None

    def acquire(self) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        fd = open(self.path, "w")
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            fd.close()
            raise RuntimeError(f"single-writer lock already held: {self.path}") from None
        self._fd = fd

    def release(self) -> None:
        if self._fd:
            try:
                fcntl.flock(self._fd, fcntl.LOCK_UN)
            finally:
                self._fd.close()
                self._fd = None

    @property
    def held(self) -> bool:
        return self._fd is not None


class LedgerStore:
    """Ledger persistence as canonical JSON.

    Writes go to a temp file that is fsync'd and renamed over the target, so
    readers only ever see a complete ledger.

    When an in-memory custody is attached its token state is written under
    "custody" in the same file and restored on load, so ledger and holdings
    survive a restart together.
    """

    def __init__(
        self,
        path: str,
        *,
        lock: Optional[SingleWriterLock] = None,
        custody: Optional[InMemoryTokenCustody] = None,
    ) -> None:
        self.path = Path(path)
        self.custody = custody
        self._lock = lock or SingleWriterLock(str(self.path) + ".lock")

    def open(self) -> AccountLedger:
        """Acquire the writer lock and load the ledger (empty if missing)."""
        if not self._lock.held:
            self._lock.acquire()
        try:
            return self.load()
        except Exception:
            self._lock.release()
            raise

    def close(self) -> None:
        self._lock.release()

    def load(self) -> AccountLedger:
        if not self.path.exists():
            return AccountLedger()
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        ledger = AccountLedger.from_json(raw)
        if not ledger.verify_conservation():
            raise ValueError(
                f"ledger file {str(self.path)!r} fails conservation: "
                f"total_balance={ledger.total_balance} sum={ledger.sum_balances()}"
            )
        if self.custody is not None and "custody" in raw:
            self.custody.load_json(raw["custody"])
        return ledger

    def save(self, ledger: AccountLedger) -> None:
        if not self._lock.held:
            raise RuntimeError(f"ledger store not opened for writing: {self.path}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        obj = ledger.to_json()
        if self.custody is not None:
            obj["custody"] = self.custody.to_json()
        data = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)


__all__ = ["SingleWriterLock", "LedgerStore"]
