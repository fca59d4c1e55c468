"""
Validation and normalization of inbound POS records.

The gateway is the only writer of tenant stores: it validates the raw body,
fills defaults, stamps id and timestamp, appends the record and publishes it.
A rejected body leaves the store and the subscribers untouched.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as SchemaError

from .. import config
from ..errors import ValidationError
from ..logging_config import mask_token
from ..metrics import INGEST_REJECTED_TOTAL, RECORDS_INGESTED_TOTAL
from ..schemas.records import ReservationIn, ReservationRecord, TransactionIn, TransactionRecord
from .aggregation import utc_date, utc_now
from .broadcast import BroadcastHub
from .registry import TenantRegistry

logger = logging.getLogger("pulse")

M = TypeVar("M", bound=BaseModel)

# Field-specific messages; anything else gets the pydantic wording
FIELD_MESSAGES = {
    "amount": "invalid amount: a positive number is required",
    "persons": "invalid persons: a positive integer is required",
}


def _describe(exc: SchemaError) -> tuple:
    fields: List[str] = []
    parts: List[str] = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        if field in fields:
            continue
        fields.append(field)
        if err.get("type") == "missing":
            parts.append(f"missing required field: {field}")
        else:
            parts.append(FIELD_MESSAGES.get(field, f"{field}: {err.get('msg')}"))
    return "; ".join(parts), fields


class IngestionGateway:

    def __init__(self, registry: TenantRegistry, hub: BroadcastHub,
                 clock: Callable[[], datetime] = utc_now):
        self.registry = registry
        self.hub = hub
        self.clock = clock

    def _parse(self, kind: str, token: str, model: Type[M], raw: Any) -> M:
        if not isinstance(raw, dict):
            INGEST_REJECTED_TOTAL.labels(kind=kind).inc()
            raise ValidationError("request body must be a JSON object")
        try:
            return model.model_validate(raw)
        except SchemaError as e:
            message, fields = _describe(e)
            INGEST_REJECTED_TOTAL.labels(kind=kind).inc()
            logger.warning("ingest rejected", extra={
                "component": "ingest",
                "tenant": mask_token(token),
                "kind": kind,
                "fields": fields,
            })
            raise ValidationError(message, fields=fields) from None

    def ingest_transaction(self, token: str, raw_fields: Optional[Dict[str, Any]]) -> TransactionRecord:
        body = self._parse("tx", token, TransactionIn, raw_fields)
        record = TransactionRecord(
            id=uuid.uuid4().hex,
            amount=body.amount,
            currency=body.currency or config.DEFAULT_CURRENCY,
            method=body.method or config.DEFAULT_METHOD,
            item=body.item or config.DEFAULT_ITEM,
            timestamp=self.clock(),
        )
        store = self.registry.get_or_create(token)
        with store.lock:
            store.append_transaction(record)
            self.hub.publish(store, "tx", record.to_event())
        RECORDS_INGESTED_TOTAL.labels(kind="tx").inc()

        logger.info("transaction ingested", extra={
            "component": "ingest",
            "tenant": mask_token(token),
            "amount": record.amount,
            "currency": record.currency,
            "item": record.item,
        })
        return record

    def ingest_reservation(self, token: str, raw_fields: Optional[Dict[str, Any]]) -> ReservationRecord:
        body = self._parse("reservation", token, ReservationIn, raw_fields)
        now = self.clock()
        record = ReservationRecord(
            id=uuid.uuid4().hex,
            name=body.name,
            phone=body.phone,
            persons=body.persons,
            date=body.date or utc_date(now).isoformat(),
            time=body.time,
            table=body.table or config.UNASSIGNED_TABLE,
            notes=body.notes or "",
            timestamp=now,
            status=config.RESERVATION_STATUS,
        )
        store = self.registry.get_or_create(token)
        with store.lock:
            store.append_reservation(record)
            self.hub.publish(store, "reservation", record.to_event())
        RECORDS_INGESTED_TOTAL.labels(kind="reservation").inc()

        logger.info("reservation ingested", extra={
            "component": "ingest",
            "tenant": mask_token(token),
            "persons": record.persons,
            "time": record.time,
        })
        return record
