"""
"Today" aggregates derived from a tenant's record history.

All dates are UTC calendar dates. Callers capture ``now`` once (``utc_now()``)
and pass it in, so one request never straddles midnight.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from ..schemas.records import ReservationRecord, SalesSummary
from ..schemas.shop import ShopConfig
from .store import TenantStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_date(ts: datetime) -> date:
    """Calendar date of ``ts`` in UTC; naive values are taken as UTC already"""
    if ts.tzinfo is None:
        return ts.date()
    return ts.astimezone(timezone.utc).date()


def today_sales_summary(store: TenantStore, now: datetime) -> SalesSummary:
    today = utc_date(now)
    total = 0.0
    count = 0
    for tx in store.all_transactions():
        if utc_date(tx.timestamp) == today:
            total += tx.amount
            count += 1
    return SalesSummary(total_amount=total, transaction_count=count, date=today.isoformat())


def _reservation_day(reservation: ReservationRecord) -> str:
    return reservation.date or utc_date(reservation.timestamp).isoformat()


def today_reservations(store: TenantStore, now: datetime) -> List[ReservationRecord]:
    """Reservations for today's date, ordered by their ``HH:MM`` time string"""
    today = utc_date(now).isoformat()
    matches = [r for r in store.all_reservations() if _reservation_day(r) == today]
    # sorted() is stable: equal times keep insertion order
    return sorted(matches, key=lambda r: r.time)


def bootstrap_snapshot(store: TenantStore, shop: Optional[ShopConfig], now: datetime) -> Dict[str, Any]:
    """First message of every live stream: where the subscriber's view starts"""
    with store.lock:
        summary = today_sales_summary(store, now)
        reservations = today_reservations(store, now)
    return {
        "shop": shop.name if shop else None,
        **summary.to_dict(),
        "reservations": len(reservations),
    }
