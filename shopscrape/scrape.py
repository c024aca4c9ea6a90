import asyncio
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from .cache import Clock, ScrapeCache
from .config import Settings, get_settings
from .detector import detect_containers
from .errors import ExtractionError, ValidationError
from .fetcher import PageFetcher, build_fetcher
from .fields import extract_all
from .normalizer import normalize_all
from .schema import ProductRow, ScrapeResult, Store, StoreCreate
from .sites import favicon_for, store_name_for
from .storage import (
    CacheStore,
    FileCacheStore,
    FileStoreDirectory,
    JsonlProductRepository,
    MemoryCacheStore,
    MemoryProductRepository,
    MemoryStoreDirectory,
    ProductRepository,
    StoreDirectory,
)
from .structured import extract_structured

logger = logging.getLogger(__name__)


def validate_store_url(url: Any) -> str:
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("storeUrl is required")
    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValidationError(f"Invalid store URL: {url!r}")
    return url


def _recoverable(fn: Callable[..., List[Dict[str, Any]]], *args) -> List[Dict[str, Any]]:
    try:
        return fn(*args)
    except ExtractionError as exc:
        logger.warning("[EXTRACT] %s; continuing with no records", exc, exc_info=True)
        return []


def _dom_records(soup: BeautifulSoup, page_url: Optional[str]) -> List[Dict[str, Any]]:
    try:
        return extract_all(detect_containers(soup, page_url), page_url)
    except Exception as exc:
        raise ExtractionError(f"DOM extraction failed: {exc}") from exc


def _structured_records(soup: BeautifulSoup, page_url: Optional[str]) -> List[Dict[str, Any]]:
    try:
        return extract_structured(soup, page_url)
    except Exception as exc:
        raise ExtractionError(f"structured data failed: {exc}") from exc


def extract_products(html: str, page_url: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Raw product records for one listing page: DOM heuristics first, JSON-LD
    only when those found nothing. Failures degrade to an empty list.
    """
    try:
        soup = BeautifulSoup(html or "", "lxml")
    except Exception as exc:
        logger.warning("[EXTRACT] could not parse markup for %s: %s", page_url, exc)
        return []

    records = _recoverable(_dom_records, soup, page_url)
    if not records:
        logger.info("[EXTRACT] DOM pass found nothing on %s, trying JSON-LD", page_url)
        records = _recoverable(_structured_records, soup, page_url)
    return records


class ScrapeService:
    """fetch → detect → extract → fallback → normalize → cache → persist."""

    def __init__(
        self,
        stores: StoreDirectory,
        cache: ScrapeCache,
        products: ProductRepository,
        fetcher: PageFetcher,
        clock: Optional[Clock] = None,
    ):
        self.stores = stores
        self.cache = cache
        self.products = products
        self.fetcher = fetcher
        self.clock = clock or cache.clock

    # -- stores -------------------------------------------------------
    def list_stores(self) -> List[Store]:
        return self.stores.list()

    def create_store(self, store: StoreCreate) -> Tuple[Store, bool]:
        """Returns ``(store, created)``; a known URL gives back the existing store."""
        validate_store_url(store.url)
        existing = self.stores.get_by_url(store.url)
        if existing is not None:
            return existing, False
        return self.stores.create(store), True

    def resolve_store(self, url: str) -> Store:
        store = self.stores.get_by_url(url)
        if store is None:
            name = store_name_for(url)
            logger.info("[STORE] creating new store %s for %s", name, url)
            store = self.stores.create(StoreCreate(name=name, url=url, logo=favicon_for(url), is_preset=False))
        return store

    def list_products(self, store_id: int) -> List[ProductRow]:
        return self.products.list_for_store(store_id)

    # -- scraping -----------------------------------------------------
    def scrape(self, store_url: str) -> ScrapeResult:
        url = validate_store_url(store_url)
        store = self.resolve_store(url)

        cached = self.cache.get_fresh(store.id)
        if cached is not None:
            return cached

        logger.info("[SCRAPE] no cache or cache expired, scraping %s", url)
        html = self.fetcher.fetch(url)

        raw = extract_products(html, url)
        products = normalize_all(raw, url)
        logger.info("[SCRAPE] %d raw records → %d products for %s", len(raw), len(products), url)

        result = ScrapeResult(
            store_name=store.name,
            store_url=store.url,
            products=products,
            timestamp=self.clock(),
        )
        self.cache.put(store.id, result)
        self.products.append_all(store.id, products)
        return result


def build_service(settings: Settings, clock: Optional[Clock] = None) -> ScrapeService:
    stores: StoreDirectory
    cache_store: CacheStore
    products: ProductRepository

    if settings.storage_backend == "supabase":
        from .supabase_client import make_supabase
        from .supabase_store import SupabaseCacheStore, SupabaseProductRepository, SupabaseStoreDirectory

        client = make_supabase(settings)
        stores = SupabaseStoreDirectory(client)
        cache_store = SupabaseCacheStore(client)
        products = SupabaseProductRepository(client)
    elif settings.storage_backend == "file":
        stores = FileStoreDirectory(settings.data_dir)
        cache_store = FileCacheStore(settings.data_dir)
        products = JsonlProductRepository(settings.data_dir)
    else:
        stores = MemoryStoreDirectory()
        cache_store = MemoryCacheStore()
        products = MemoryProductRepository()

    logger.info("[INIT] storage backend: %s", settings.storage_backend)
    return ScrapeService(
        stores=stores,
        cache=ScrapeCache(cache_store, clock=clock),
        products=products,
        fetcher=build_fetcher(settings),
    )


async def main(urls: List[str], concurrency: int = 3):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print(f"[INIT] Starting scrape run for {len(urls)} store(s)")

    service = build_service(settings)
    sem = asyncio.Semaphore(concurrency)

    async def safe_process(url: str):
        async with sem:
            print(f"[JOB] FETCH → {url}")
            try:
                result = await asyncio.to_thread(service.scrape, url)
            except Exception as e:
                print(f"[JOB] ERR  → {url} | {type(e).__name__}: {e}")
                return
            print(f"[JOB] OK   → {result.store_name} | {len(result.products)} products | {result.timestamp.isoformat()}")
            for p in result.products[:5]:
                print(f"         {p.name} | {p.price}")

    await asyncio.gather(*(safe_process(u) for u in urls))
    print("[DONE] Scrape run finished.")


if __name__ == "__main__":
    #   python -m shopscrape.scrape https://shop.example/collections/all [more urls...]
    if len(sys.argv) < 2:
        print("usage: python -m shopscrape.scrape STORE_URL [STORE_URL ...]")
        sys.exit(2)
    asyncio.run(main(sys.argv[1:]))
