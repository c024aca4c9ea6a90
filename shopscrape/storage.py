"""
Store directory, scrape cache and product-row storage.

The pipeline only talks to the three Protocols below. Instances are created
once when the service starts (see scrape.build_service) and passed in; there
is no module-level state. Writes are last-writer-wins, nothing is locked.
"""
import logging
import threading
import uuid
from itertools import count
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

import orjson

from .schema import ProductData, ProductRow, ScrapeResult, Store, StoreCreate, utcnow

logger = logging.getLogger(__name__)

PRESET_STORES = [
    StoreCreate(
        name="Amazon",
        url="https://www.amazon.com",
        logo="https://cdn.jsdelivr.net/npm/simple-icons@v8/icons/amazon.svg",
        is_preset=True,
    ),
    StoreCreate(
        name="Walmart",
        url="https://www.walmart.com",
        logo="https://cdn.jsdelivr.net/npm/simple-icons@v8/icons/walmart.svg",
        is_preset=True,
    ),
    StoreCreate(
        name="Best Buy",
        url="https://www.bestbuy.com",
        logo="https://cdn.jsdelivr.net/npm/simple-icons@v8/icons/bestbuy.svg",
        is_preset=True,
    ),
    StoreCreate(
        name="Target",
        url="https://www.target.com",
        logo="https://cdn.jsdelivr.net/npm/simple-icons@v8/icons/target.svg",
        is_preset=True,
    ),
]


class StoreDirectory(Protocol):
    def list(self) -> List[Store]: ...

    def get_by_url(self, url: str) -> Optional[Store]: ...

    def create(self, store: StoreCreate) -> Store: ...


class CacheStore(Protocol):
    def get(self, store_id: int) -> Optional[ScrapeResult]: ...

    def put(self, store_id: int, result: ScrapeResult) -> None: ...


class ProductRepository(Protocol):
    def append_all(self, store_id: int, products: Sequence[ProductData]) -> List[ProductRow]: ...

    def list_for_store(self, store_id: int) -> List[ProductRow]: ...


def to_row(row_id: int, store_id: int, product: ProductData) -> ProductRow:
    return ProductRow(id=row_id, store_id=store_id, created_at=utcnow(), **product.model_dump())


# ------------------------------------------------------------------ #
# In-memory
# ------------------------------------------------------------------ #
class MemoryStoreDirectory:
    def __init__(self, presets: Sequence[StoreCreate] = PRESET_STORES):
        self._stores: Dict[int, Store] = {}
        self._ids = count(1)
        for preset in presets:
            self.create(preset)

    def list(self) -> List[Store]:
        return list(self._stores.values())

    def get_by_url(self, url: str) -> Optional[Store]:
        for store in self._stores.values():
            if store.url == url:
                return store
        return None

    def create(self, store: StoreCreate) -> Store:
        created = Store(id=next(self._ids), **store.model_dump())
        self._stores[created.id] = created
        return created


class MemoryCacheStore:
    def __init__(self):
        self._entries: Dict[int, ScrapeResult] = {}

    def get(self, store_id: int) -> Optional[ScrapeResult]:
        return self._entries.get(store_id)

    def put(self, store_id: int, result: ScrapeResult) -> None:
        self._entries[store_id] = result


class MemoryProductRepository:
    def __init__(self):
        self._rows: List[ProductRow] = []
        self._ids = count(1)

    def append_all(self, store_id: int, products: Sequence[ProductData]) -> List[ProductRow]:
        rows = [to_row(next(self._ids), store_id, p) for p in products]
        self._rows.extend(rows)
        return rows

    def list_for_store(self, store_id: int) -> List[ProductRow]:
        return [r for r in self._rows if r.store_id == store_id]


# ------------------------------------------------------------------ #
# Files under DATA_DIR (orjson)
# ------------------------------------------------------------------ #
def _dump(model) -> bytes:
    return orjson.dumps(model.model_dump(mode="json", by_alias=True))


def _replace(path: Path, data: bytes) -> None:
    # readers only ever see a complete file
    tmp = path.with_name(f"{path.name}.{uuid.uuid4().hex}.tmp")
    tmp.write_bytes(data)
    tmp.replace(path)


class FileStoreDirectory:
    """All stores in one ``stores.json`` document, rewritten on create()."""

    def __init__(self, root: Path, presets: Sequence[StoreCreate] = PRESET_STORES):
        self.path = Path(root) / "stores.json"
        self._lock = threading.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write([])
            for preset in presets:
                self.create(preset)

    def _read(self) -> List[Store]:
        return [Store.model_validate(s) for s in orjson.loads(self.path.read_bytes())]

    def _write(self, stores: List[Store]) -> None:
        _replace(self.path, orjson.dumps([s.model_dump(mode="json", by_alias=True) for s in stores]))

    def list(self) -> List[Store]:
        return self._read()

    def get_by_url(self, url: str) -> Optional[Store]:
        return next((s for s in self._read() if s.url == url), None)

    def create(self, store: StoreCreate) -> Store:
        with self._lock:
            stores = self._read()
            created = Store(id=max((s.id for s in stores), default=0) + 1, **store.model_dump())
            stores.append(created)
            self._write(stores)
        return created


class FileCacheStore:
    """One ``cache/<store_id>.json`` per store; put() replaces the whole file."""

    def __init__(self, root: Path):
        self.dir = Path(root) / "cache"
        self.dir.mkdir(parents=True, exist_ok=True)

    def _path(self, store_id: int) -> Path:
        return self.dir / f"{int(store_id)}.json"

    def get(self, store_id: int) -> Optional[ScrapeResult]:
        p = self._path(store_id)
        if not p.exists():
            return None
        return ScrapeResult.model_validate(orjson.loads(p.read_bytes()))

    def put(self, store_id: int, result: ScrapeResult) -> None:
        _replace(self._path(store_id), _dump(result))


class JsonlProductRepository:
    """Append-only ``products.jsonl``; ids continue from the number of stored rows."""

    def __init__(self, root: Path):
        self.path = Path(root) / "products.jsonl"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self._lock = threading.Lock()
        with open(self.path, "rb") as f:
            self._ids = count(sum(1 for line in f if line.strip()) + 1)

    def append_all(self, store_id: int, products: Sequence[ProductData]) -> List[ProductRow]:
        with self._lock:
            rows = [to_row(next(self._ids), store_id, p) for p in products]
            with open(self.path, "ab") as f:
                f.write(b"".join(_dump(row) + b"\n" for row in rows))
        return rows

    def list_for_store(self, store_id: int) -> List[ProductRow]:
        rows = []
        with open(self.path, "rb") as f:
            for line in f:
                if not line.strip():
                    continue
                data = orjson.loads(line)
                if data.get("storeId") == store_id:
                    rows.append(ProductRow.model_validate(data))
        return rows
