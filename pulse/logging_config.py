import logging
import logging.config
import os
import yaml
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import contextvars

from . import config as settings

# Context variable for trace ID
trace_id_var = contextvars.ContextVar('trace_id', default=None)

# Record attributes that are part of the fixed JSON layout or of LogRecord itself
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'method', 'path', 'status',
    'latency_ms', 'client_ip', 'tenant', 'component',
}

def get_trace_id() -> Optional[str]:
    """Get the current trace ID from context"""
    return trace_id_var.get()

def mask_token(token: Optional[str]) -> str:
    """Mask a shop token for logs (first 2 + last 2 chars)"""
    if not token:
        return "-"
    if len(token) <= 6:
        return "*" * len(token)
    return f"{token[:2]}****{token[-2:]}"

def log_tenant_event(event_type: str, message: str, token: Optional[str] = None, **kwargs):
    """Log tenant-scoped events with structured data"""
    logger = logging.getLogger("pulse")
    logger.info(message, extra={
        "event_type": event_type,
        "component": "tenants",
        "tenant": mask_token(token) if token else None,
        **kwargs
    })

class JsonFormatter(logging.Formatter):
    """Custom JSON formatter with structured fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "trace_id": get_trace_id(),
            "method": getattr(record, 'method', None),
            "path": getattr(record, 'path', None),
            "status": getattr(record, 'status', None),
            "latency_ms": getattr(record, 'latency_ms', None),
            "client_ip": getattr(record, 'client_ip', None),
            "tenant": getattr(record, 'tenant', None),
            "component": getattr(record, 'component', 'api')
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)

def _default_config(log_level: str, log_format: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "text": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": log_format,
                "stream": "ext://sys.stdout"
            }
        },
        "loggers": {
            "pulse": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": log_level, "handlers": ["console"], "propagate": False}
        },
        "root": {
            "level": log_level,
            "handlers": ["console"]
        }
    }

def setup_logging(config_path: str = "LOGGING.yaml") -> Dict[str, Any]:
    """Setup logging configuration from YAML file or environment"""

    log_format = settings.LOG_FORMAT if settings.LOG_FORMAT in ("json", "text") else "json"
    log_level = settings.LOG_LEVEL.upper()

    config = None
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Warning: Could not load {config_path}: {e}")

    if not config:
        config = _default_config(log_level, log_format)
    else:
        # Environment wins over the file for format and level
        for handler in config.get("handlers", {}).values():
            if "formatter" in handler and log_format in config.get("formatters", {}):
                handler["formatter"] = log_format
        for logger in config.get("loggers", {}).values():
            logger["level"] = log_level

    logging.config.dictConfig(config)
    return config
