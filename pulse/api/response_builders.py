"""
Response builders for consistent ``{ok: ...}`` bodies
"""

from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional

from ..errors import PulseError, ValidationError

def build_ok(**fields: Any) -> Dict[str, Any]:
    """Success body: ``ok`` first, then the endpoint's fields"""
    return {"ok": True, **fields}

def build_error_response(status_code: int, msg: str, fields: Optional[List[str]] = None) -> JSONResponse:
    content: Dict[str, Any] = {"ok": False, "msg": msg}
    if fields:
        content["fields"] = fields
    return JSONResponse(status_code=status_code, content=content)

def build_pulse_error_response(exc: PulseError) -> JSONResponse:
    fields = exc.fields if isinstance(exc, ValidationError) else None
    return build_error_response(exc.status_code, exc.message, fields)
