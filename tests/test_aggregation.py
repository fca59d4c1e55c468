"""
Tests for today's sales summary and reservation listing
"""

from datetime import datetime, timedelta, timezone

from pulse.schemas.shop import ShopConfig
from pulse.services.aggregation import (
    bootstrap_snapshot,
    today_reservations,
    today_sales_summary,
    utc_date,
)
from pulse.services.store import TenantStore

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


def test_empty_store_gives_zero_totals():
    summary = today_sales_summary(TenantStore("shopA"), NOW)
    assert summary.total_amount == 0
    assert summary.transaction_count == 0
    assert summary.to_dict() == {"totalAmount": 0, "transactionCount": 0, "date": "2026-10-18"}


def test_only_todays_transactions_are_counted(make_tx):
    store = TenantStore("shopA")
    midnight = datetime(2026, 10, 18, tzinfo=timezone.utc)
    store.append_transaction(make_tx(amount=100, timestamp=midnight - timedelta(seconds=1)))
    store.append_transaction(make_tx(amount=50, timestamp=midnight))
    store.append_transaction(make_tx(amount=25, timestamp=NOW))
    store.append_transaction(make_tx(amount=999, timestamp=midnight + timedelta(days=1)))

    summary = today_sales_summary(store, NOW)
    assert summary.total_amount == 75
    assert summary.transaction_count == 2
    assert summary.date == "2026-10-18"


def test_dates_are_compared_in_utc(make_tx):
    store = TenantStore("shopA")
    # 01:00 on the 19th in UTC+2 is 23:00 on the 18th in UTC
    plus_two = timezone(timedelta(hours=2))
    store.append_transaction(make_tx(amount=40, timestamp=datetime(2026, 10, 19, 1, 0, tzinfo=plus_two)))

    assert today_sales_summary(store, NOW).transaction_count == 1
    assert utc_date(datetime(2026, 10, 19, 1, 0, tzinfo=plus_two)).isoformat() == "2026-10-18"


def test_summary_is_deterministic_for_same_now(make_tx):
    store = TenantStore("shopA")
    for amount in (1.5, 2.5, 3):
        store.append_transaction(make_tx(amount=amount))
    assert today_sales_summary(store, NOW) == today_sales_summary(store, NOW)


def test_reservations_sorted_by_time(make_reservation):
    store = TenantStore("shopA")
    for t in ("18:30", "09:00", "12:15"):
        store.append_reservation(make_reservation(time=t))

    assert [r.time for r in today_reservations(store, NOW)] == ["09:00", "12:15", "18:30"]


def test_reservations_filtered_by_reservation_date(make_reservation):
    store = TenantStore("shopA")
    store.append_reservation(make_reservation(time="10:00", date="2026-10-18"))
    # created today, booked for tomorrow
    store.append_reservation(make_reservation(time="08:00", date="2026-10-19"))
    # created yesterday, booked for today
    store.append_reservation(make_reservation(time="20:00", date="2026-10-18",
                                              timestamp=NOW - timedelta(days=1)))

    assert [r.time for r in today_reservations(store, NOW)] == ["10:00", "20:00"]


def test_reservation_without_date_falls_back_to_creation_day(make_reservation):
    store = TenantStore("shopA")
    store.append_reservation(make_reservation(time="11:00", date=""))
    store.append_reservation(make_reservation(time="09:00", date="", timestamp=NOW - timedelta(days=1)))

    assert [r.time for r in today_reservations(store, NOW)] == ["11:00"]


def test_bootstrap_snapshot(make_tx, make_reservation):
    store = TenantStore("shopA")
    store.append_transaction(make_tx(amount=50))
    store.append_reservation(make_reservation())
    shop = ShopConfig(token="shopA", meta={"name": "Shop A"})

    assert bootstrap_snapshot(store, shop, NOW) == {
        "shop": "Shop A",
        "totalAmount": 50,
        "transactionCount": 1,
        "date": "2026-10-18",
        "reservations": 1,
    }
