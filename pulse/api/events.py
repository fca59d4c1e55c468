import asyncio
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Request
from starlette.responses import StreamingResponse

from ..schemas.shop import ShopConfig
from ..services.aggregation import bootstrap_snapshot, utc_now
from ..services.broadcast import BroadcastHub
from ..services.store import TenantStore
from .auth import require_query_shop

router = APIRouter(tags=["Live"])

KEEPALIVE_FRAME = ": keepalive\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

async def live_events(
    request: Request,
    hub: BroadcastHub,
    store: TenantStore,
    shop: ShopConfig,
    keepalive: float,
) -> AsyncGenerator[str, None]:
    """
    Yield SSE frames for one dashboard: the bootstrap snapshot, then live events.

    The subscriber is registered when the stream starts and removed in
    ``finally``, which runs when the client disconnects (Starlette cancels the
    generator) or when the hub has closed the channel.
    """
    with store.lock:
        channel = hub.subscribe(store, bootstrap_snapshot(store, shop, utc_now()))
    try:
        while not channel.closed:
            try:
                message = await asyncio.wait_for(channel.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                if channel.closed or await request.is_disconnected():
                    break
                yield KEEPALIVE_FRAME
                continue
            yield message
    finally:
        hub.unsubscribe(store, channel)

@router.get("/events")
async def stream_events(request: Request, shop: ShopConfig = Depends(require_query_shop)):
    """Server-Sent Events stream of a shop's sales and reservations"""
    state = request.app.state
    store = state.registry.get_or_create(shop.token)
    return StreamingResponse(
        live_events(request, state.hub, store, shop, state.sse_keepalive),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
