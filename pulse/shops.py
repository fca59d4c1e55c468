"""
Shop profile lookup: maps an opaque token to its JSON profile on disk.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as SchemaError

from .config import SHOP_CONFIG_DIR
from .logging_config import mask_token
from .schemas.shop import ShopConfig

logger = logging.getLogger("pulse")

def _profile_path(token: str, config_dir: Path) -> Optional[Path]:
    """Resolve the profile path, refusing tokens that escape ``config_dir``"""
    if not token or "/" in token or "\\" in token or "\x00" in token or token.startswith("."):
        return None
    base = config_dir.resolve()
    path = (base / f"{token}.json").resolve()
    if path.parent != base:
        return None
    return path

def load_config(token: Optional[str], config_dir: Union[str, Path, None] = None) -> Optional[ShopConfig]:
    """
    Return the shop profile for ``token``, or None.

    Every failure cause (missing file, unreadable file, unusable token, bad
    JSON, bad shape) yields None so callers answer all of them the same way.
    """
    if not token:
        return None

    try:
        path = _profile_path(token, Path(config_dir) if config_dir else SHOP_CONFIG_DIR)
        if path is None or not path.is_file():
            logger.info("shop profile not found", extra={"component": "shops", "tenant": mask_token(token)})
            return None
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("profile must be a JSON object")
        raw["token"] = token
        return ShopConfig.model_validate(raw)
    except (OSError, ValueError, SchemaError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors;
        # over-long names surface as OSError from the filesystem
        logger.warning("shop profile unreadable", extra={
            "component": "shops",
            "tenant": mask_token(token),
            "error": str(e).splitlines()[0] if str(e) else type(e).__name__,
        })
        return None

class ShopDirectory:
    """Config lookup bound to one directory; injected into the app at startup."""

    def __init__(self, config_dir: Union[str, Path, None] = None):
        self.config_dir = Path(config_dir) if config_dir else SHOP_CONFIG_DIR

    def __call__(self, token: Optional[str]) -> Optional[ShopConfig]:
        return load_config(token, self.config_dir)
