"""
Service banner and liveness probe - no authentication required
"""

from fastapi import APIRouter

from ..config import API_VERSION, FEATURES
from .response_builders import build_ok

router = APIRouter()

@router.get("/")
async def root():
    return build_ok(message="Pulse API OK", version=API_VERSION, features=FEATURES)

# Unauthenticated probe for kube/docker HEALTHCHECKs:
@router.get("/healthz", include_in_schema=False)
async def healthz():
    return {"status": "ok"}
