import threading
from typing import Dict, List, Optional

from ..logging_config import log_tenant_event
from ..metrics import TENANTS
from .store import TenantStore


class TenantRegistry:
    """Token -> TenantStore map owned by the application; stores live until shutdown."""

    def __init__(self):
        self._stores: Dict[str, TenantStore] = {}
        self._lock = threading.Lock()

    def get_or_create(self, token: str) -> TenantStore:
        store = self._stores.get(token)
        if store is not None:
            return store
        with self._lock:
            store = self._stores.get(token)
            if store is None:
                store = TenantStore(token)
                self._stores[token] = store
                TENANTS.inc()
                log_tenant_event("tenant_created", "tenant store created", token=token,
                                 tenants=len(self._stores))
            return store

    def get(self, token: str) -> Optional[TenantStore]:
        return self._stores.get(token)

    def tokens(self) -> List[str]:
        with self._lock:
            return list(self._stores)

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, token: str) -> bool:
        return token in self._stores
