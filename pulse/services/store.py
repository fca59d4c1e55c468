"""
Per-tenant record history and live subscriber set.
"""

import threading
from typing import Dict, Tuple, TYPE_CHECKING

from ..schemas.records import ReservationRecord, TransactionRecord

if TYPE_CHECKING:
    from .broadcast import Subscriber


class TenantStore:
    """
    Holds one tenant's records and subscribers.

    Every read and write goes through ``lock``. The lock is re-entrant so the
    broadcast hub can hold it across a snapshot-and-deliver sequence while
    calling back into the store.
    """

    def __init__(self, token: str):
        self.token = token
        self.lock = threading.RLock()
        self._transactions: list = []
        self._reservations: list = []
        # dict keys: a set that iterates in connection order
        self._subscribers: Dict["Subscriber", None] = {}

    # Records

    def append_transaction(self, record: TransactionRecord) -> TransactionRecord:
        with self.lock:
            self._transactions.append(record)
        return record

    def append_reservation(self, record: ReservationRecord) -> ReservationRecord:
        with self.lock:
            self._reservations.append(record)
        return record

    def all_transactions(self) -> Tuple[TransactionRecord, ...]:
        with self.lock:
            return tuple(self._transactions)

    def all_reservations(self) -> Tuple[ReservationRecord, ...]:
        with self.lock:
            return tuple(self._reservations)

    # Subscribers

    def add_subscriber(self, channel: "Subscriber") -> None:
        with self.lock:
            self._subscribers[channel] = None

    def remove_subscriber(self, channel: "Subscriber") -> bool:
        """Remove ``channel``; returns False if it was already gone."""
        with self.lock:
            if channel not in self._subscribers:
                return False
            del self._subscribers[channel]
            return True

    def subscribers(self) -> Tuple["Subscriber", ...]:
        with self.lock:
            return tuple(self._subscribers)

    def subscriber_count(self) -> int:
        with self.lock:
            return len(self._subscribers)

    def __repr__(self) -> str:
        return (f"TenantStore(transactions={len(self._transactions)}, "
                f"reservations={len(self._reservations)}, subscribers={len(self._subscribers)})")
