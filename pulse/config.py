"""
Configuration module for Pulse API
"""

# Application configuration
import os

def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")

# Version information
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

def _read_version_from_repo(default: str = "dev") -> str:
    try:
        v = (REPO_ROOT / "VERSION").read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    return os.getenv("APP_VERSION", default)

APP_NAME = os.getenv("APP_NAME", "pulse-api")
API_VERSION = _read_version_from_repo()
APP_PORT = int(os.getenv("APP_PORT", "3000"))

# Shop profiles: one <token>.json per shop
SHOP_CONFIG_DIR = Path(os.getenv("PULSE_CONFIG_DIR", str(REPO_ROOT / "configs")))

# Ingestion fallbacks
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "FCFA")
DEFAULT_METHOD = os.getenv("DEFAULT_METHOD", "cash")
DEFAULT_ITEM = os.getenv("DEFAULT_ITEM", "sale")
UNASSIGNED_TABLE = os.getenv("UNASSIGNED_TABLE", "unassigned")
RESERVATION_STATUS = os.getenv("RESERVATION_STATUS", "confirmed")

# Live stream configuration
SUBSCRIBER_QUEUE_MAX = int(os.getenv("SUBSCRIBER_QUEUE_MAX", "1000"))
SSE_KEEPALIVE_SECONDS = float(os.getenv("SSE_KEEPALIVE_SECONDS", "15"))

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_SAMPLE_RATE = float(os.getenv("LOG_SAMPLE_RATE", "1.0"))
LOG_EXCLUDE_PATHS = set(os.getenv("LOG_EXCLUDE_PATHS", "/healthz,/metrics").split(","))
HTTP_LOG_ENABLED = env_bool("HTTP_LOG_ENABLED", True)

# Security configuration
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

FEATURES = ["sales", "reservations", "live"]
