"""
Error taxonomy shared by the HTTP layer and the tenant services.
"""

from typing import List, Optional


class PulseError(Exception):
    """Base class for errors surfaced to API callers as ``{ok: false}``."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(PulseError):
    """Missing token, or a token with no shop profile behind it."""

    status_code = 401


class ValidationError(PulseError):
    """Ingestion body is malformed or misses required fields."""

    status_code = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class DeliveryError(Exception):
    """A write to a live subscriber failed. Never leaves the broadcast hub."""
