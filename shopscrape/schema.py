from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

CANONICAL_FIELDS = ("name", "price", "imageUrl", "description", "url", "category")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(min_length=1)
    price: str = Field(min_length=1)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    description: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ScrapeResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    store_name: str = Field(alias="storeName")
    store_url: str = Field(alias="storeUrl")
    products: List[ProductData] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=utcnow)


# --- stores ---
# url is unique; id is assigned by the StoreDirectory on create().
class StoreCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    url: str
    logo: Optional[str] = None
    is_preset: bool = Field(default=False, alias="isPreset")


class Store(StoreCreate):
    id: int


# --- products ---
# One row per product per scrape run; rows are never deduplicated.
class ProductRow(ProductData):
    id: int
    store_id: int = Field(alias="storeId")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")


class ScrapeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    store_url: str = Field(alias="storeUrl")
