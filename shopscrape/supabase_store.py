# supabase_store.py
# Supabase-backed StoreDirectory / CacheStore / ProductRepository.
#
# Tables:
#   stores(id serial pk, name text, url text unique, logo text, is_preset bool)
#   products(id serial pk, store_id int, name text, price text, image_url text,
#            description text, url text, category text, metadata jsonb, created_at timestamptz)
#   scrape_cache(store_id int pk, result jsonb)
import logging
from typing import Any, Dict, List, Optional, Sequence

from supabase import Client

from .schema import ProductData, ProductRow, ScrapeResult, Store, StoreCreate, utcnow
from .storage import PRESET_STORES

logger = logging.getLogger(__name__)


class SupabaseError(RuntimeError):
    pass


def _rows(response) -> List[Dict[str, Any]]:
    # Supabase Python client v2 returns an object with .data and .error
    error = getattr(response, "error", None)
    if error:
        logger.error("[STORE] Supabase response.error: %s", error)
        raise SupabaseError(f"Supabase error: {error}")
    return getattr(response, "data", None) or []


def _store_from_row(row: Dict[str, Any]) -> Store:
    return Store(
        id=row["id"],
        name=row["name"],
        url=row["url"],
        logo=row.get("logo"),
        is_preset=bool(row.get("is_preset")),
    )


def _product_from_row(row: Dict[str, Any]) -> ProductRow:
    return ProductRow.model_validate({**row, "metadata": row.get("metadata") or {}})


class SupabaseStoreDirectory:
    def __init__(self, client: Client, seed_presets: bool = True):
        self.client = client
        if seed_presets:
            for preset in PRESET_STORES:
                if self.get_by_url(preset.url) is None:
                    self.create(preset)

    def list(self) -> List[Store]:
        resp = self.client.table("stores").select("*").order("id").execute()
        return [_store_from_row(r) for r in _rows(resp)]

    def get_by_url(self, url: str) -> Optional[Store]:
        resp = self.client.table("stores").select("*").eq("url", url).limit(1).execute()
        rows = _rows(resp)
        return _store_from_row(rows[0]) if rows else None

    def create(self, store: StoreCreate) -> Store:
        record = {
            "name": store.name,
            "url": store.url,
            "logo": store.logo,
            "is_preset": store.is_preset,
        }
        rows = _rows(self.client.table("stores").insert(record).execute())
        if not rows:
            raise SupabaseError(f"Failed to create store {store.url}")
        return _store_from_row(rows[0])


class SupabaseCacheStore:
    def __init__(self, client: Client):
        self.client = client

    def get(self, store_id: int) -> Optional[ScrapeResult]:
        resp = (
            self.client.table("scrape_cache")
            .select("result")
            .eq("store_id", store_id)
            .limit(1)
            .execute()
        )
        rows = _rows(resp)
        if not rows or not rows[0].get("result"):
            return None
        return ScrapeResult.model_validate(rows[0]["result"])

    def put(self, store_id: int, result: ScrapeResult) -> None:
        record = {"store_id": store_id, "result": result.model_dump(mode="json", by_alias=True)}
        _rows(self.client.table("scrape_cache").upsert(record, on_conflict="store_id").execute())


class SupabaseProductRepository:
    """Plain inserts: every scrape adds new rows, nothing is upserted."""

    def __init__(self, client: Client):
        self.client = client

    def append_all(self, store_id: int, products: Sequence[ProductData]) -> List[ProductRow]:
        if not products:
            return []
        created_at = utcnow().isoformat()
        records = [
            {
                "store_id": store_id,
                "name": p.name,
                "price": p.price,
                "image_url": p.image_url,
                "description": p.description,
                "url": p.url,
                "category": p.category,
                "metadata": p.metadata,
                "created_at": created_at,
            }
            for p in products
        ]
        rows = _rows(self.client.table("products").insert(records).execute())
        logger.info("[STORE] inserted %d product rows for store %s", len(rows), store_id)
        return [_product_from_row(r) for r in rows]

    def list_for_store(self, store_id: int) -> List[ProductRow]:
        resp = self.client.table("products").select("*").eq("store_id", store_id).order("id").execute()
        return [_product_from_row(r) for r in _rows(resp)]
