from pydantic import BaseModel, ConfigDict, Field

class ShopMeta(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = Field(..., min_length=1)

class ShopConfig(BaseModel):
    """Shop profile loaded from ``<config_dir>/<token>.json``"""
    model_config = ConfigDict(frozen=True, extra="allow")

    token: str
    meta: ShopMeta

    @property
    def name(self) -> str:
        return self.meta.name
