# tests/conftest.py
import json
import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from pulse.main import create_app
from pulse.schemas.records import ReservationRecord, TransactionRecord

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)

SHOP_PROFILES = {
    "shopA": {"meta": {"name": "Shop A", "city": "Dakar"}},
    "shopB": {"meta": {"name": "Shop B"}},
}

@pytest.fixture
def config_dir(tmp_path):
    """Shop profiles on disk, plus one that exists but cannot be parsed"""
    for token, profile in SHOP_PROFILES.items():
        (tmp_path / f"{token}.json").write_text(json.dumps(profile), encoding="utf-8")
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    return tmp_path

@pytest.fixture
def app(config_dir):
    return create_app(config_dir=config_dir)

@pytest.fixture
def client(app):
    """Unit test mode: in-process TestClient, no running server needed"""
    return TestClient(app)

@pytest.fixture
def shop_headers():
    return {"Authorization": "Bearer shopA"}

@pytest.fixture
def make_tx():
    def _make(amount=10.0, timestamp=NOW, item="Coffee"):
        return TransactionRecord(
            id=uuid.uuid4().hex,
            amount=amount,
            currency="FCFA",
            method="cash",
            item=item,
            timestamp=timestamp,
        )
    return _make

@pytest.fixture
def make_reservation():
    def _make(time="12:00", date=None, timestamp=NOW, name="Awa"):
        return ReservationRecord(
            id=uuid.uuid4().hex,
            name=name,
            phone="771234567",
            persons=2,
            date=date if date is not None else timestamp.date().isoformat(),
            time=time,
            table="unassigned",
            notes="",
            timestamp=timestamp,
            status="confirmed",
        )
    return _make
