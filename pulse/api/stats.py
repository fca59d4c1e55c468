from fastapi import APIRouter, Depends, Request

from ..schemas.shop import ShopConfig
from ..services.aggregation import today_reservations, today_sales_summary, utc_date, utc_now
from .auth import require_query_shop
from .response_builders import build_ok

router = APIRouter(prefix="/stats", tags=["Stats"])

@router.get("/today")
async def get_today_sales(request: Request, shop: ShopConfig = Depends(require_query_shop)):
    """Sales total and count for the current UTC day"""
    store = request.app.state.registry.get_or_create(shop.token)
    summary = today_sales_summary(store, utc_now())
    return build_ok(**summary.to_dict())

@router.get("/reservations")
async def get_today_reservations(request: Request, shop: ShopConfig = Depends(require_query_shop)):
    """Today's reservations ordered by time"""
    store = request.app.state.registry.get_or_create(shop.token)
    now = utc_now()
    reservations = today_reservations(store, now)
    return build_ok(
        count=len(reservations),
        reservations=[r.model_dump(mode="json") for r in reservations],
        date=utc_date(now).isoformat(),
    )
