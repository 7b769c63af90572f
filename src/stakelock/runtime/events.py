from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Iterable, List, Optional, Union

from stakelock.ledger.types import AccountChanged, DepositReplenished, Transfer, Withdrawal
from stakelock.runtime.log import log_event

Record = Union[AccountChanged, DepositReplenished, Transfer, Withdrawal]

DEFAULT_EVENT_WINDOW = 10_000

log = logging.getLogger("stakelock.events")


class EventLog:
    """Committed audit records, in emission order.

    Records only reach the log after their operation committed; a reverted
    operation publishes nothing. Every record is written to the
    "stakelock.events" logger; only the newest `max_records` stay in memory.
    """

    def __init__(self, max_records: int = DEFAULT_EVENT_WINDOW) -> None:
        if int(max_records) <= 0:
            raise ValueError(f"max_records must be > 0; got: {max_records!r}")
        self._records: Deque[Record] = deque(maxlen=int(max_records))
        self._published = 0

    @property
    def max_records(self) -> int:
        return int(self._records.maxlen or 0)

    @property
    def published(self) -> int:
        """Records published since start, including ones no longer held."""
        return self._published

    def publish(self, records: Iterable[Record]) -> None:
        for rec in records:
            self._records.append(rec)
            self._published += 1
            log_event(log, rec.kind, **_fields(rec))

    def records(self, kind: Optional[str] = None) -> List[Record]:
        if kind is None:
            return list(self._records)
        return [r for r in self._records if r.kind == kind]

    def __len__(self) -> int:
        return len(self._records)


def _fields(rec: Record) -> dict[str, Any]:
    j = rec.to_json()
    j.pop("kind", None)
    # ints above 2**53 are not safe in most JSON readers
    return {k: (str(v) if isinstance(v, int) and not isinstance(v, bool) else v) for k, v in j.items()}


__all__ = ["DEFAULT_EVENT_WINDOW", "EventLog", "Record"]
