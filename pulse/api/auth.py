# pulse/api/auth.py
from typing import Optional
from fastapi import Header, Query, Request

from ..errors import AuthError
from ..schemas.shop import ShopConfig

def _strip_bearer(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    if not value.lower().startswith("bearer "):
        return None
    return value[7:].strip() or None

def resolve_shop(request: Request, token: Optional[str]) -> ShopConfig:
    """Look the token up on every request; absent profiles are all the same 401"""
    if not token:
        raise AuthError("token required")
    shop = request.app.state.shops(token)
    if shop is None:
        raise AuthError("invalid token")
    request.state.tenant = token
    return shop

async def require_query_shop(
    request: Request,
    token: Optional[str] = Query(default=None),
) -> ShopConfig:
    # EventSource cannot set headers, so dashboards pass ?token=
    return resolve_shop(request, token)

async def require_bearer_shop(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> ShopConfig:
    return resolve_shop(request, _strip_bearer(authorization))
