from fastapi import APIRouter, Depends, Request
import json

from ..errors import ValidationError
from ..schemas.shop import ShopConfig
from ..services.aggregation import today_sales_summary
from .auth import require_bearer_shop
from .response_builders import build_ok

router = APIRouter(prefix="/ingest", tags=["Ingest"])

async def _read_json(request: Request):
    raw = await request.body()
    if not raw.strip():
        raise ValidationError("request body must be a JSON object")
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError("invalid JSON body") from None

@router.post("/tx")
async def ingest_transaction(request: Request, shop: ShopConfig = Depends(require_bearer_shop)):
    """Record one sale and push it to the shop's live dashboards"""
    body = await _read_json(request)
    gateway = request.app.state.gateway
    record = gateway.ingest_transaction(shop.token, body)

    store = request.app.state.registry.get_or_create(shop.token)
    summary = today_sales_summary(store, record.timestamp)
    return build_ok(transaction=record.model_dump(mode="json"), **summary.to_dict())

@router.post("/reservation")
async def ingest_reservation(request: Request, shop: ShopConfig = Depends(require_bearer_shop)):
    """Record one reservation and push it to the shop's live dashboards"""
    body = await _read_json(request)
    record = request.app.state.gateway.ingest_reservation(shop.token, body)
    return build_ok(reservation=record.model_dump(mode="json"))
