from typing import Any, Dict, Iterable, List, Mapping, Optional

from .currency import format_price, is_bare_amount
from .schema import CANONICAL_FIELDS, ProductData
from .sites import resolve_url

DEFAULT_NAME = "Unknown Product"
DEFAULT_PRICE = "Price unavailable"

# Ordered aliases per canonical field; first present, non-blank value wins.
FIELD_ALIASES = {
    "name": ["name", "title", "productName", "product_name"],
    "price": ["price", "priceText", "price_text", "cost"],
    "imageUrl": ["imageUrl", "image", "img", "imageSrc", "image_url"],
    "description": ["description", "desc", "productDescription", "product_description"],
    "url": ["url", "link", "productUrl", "product_url"],
    "category": ["category", "categoryName", "product_category", "productCategory"],
}
ORIGIN_KEYS = ["storeUrl", "store_url"]
CURRENCY_KEYS = ["priceCurrency", "currency"]


def norm_key(key: str) -> str:
    return str(key).replace("_", "").replace("-", "").lower()


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _lookup(raw: Mapping[str, Any], index: Dict[str, List[str]], aliases: Iterable[str]) -> Any:
    for alias in aliases:
        # exact spelling first, then keys differing only in case or separators
        keys = sorted(index.get(norm_key(alias), []), key=lambda k: k != alias)
        for key in keys:
            if not _missing(raw[key]):
                return raw[key]
    return None


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("url") or value.get("name")
    if _missing(value):
        return None
    return value.strip() if isinstance(value, str) else str(value)


def normalize(raw: Any, store_url: Optional[str] = None) -> ProductData:
    """
    Map one loosely shaped scraper record onto ProductData.

    Never raises for odd input: a bare string becomes the product name and
    anything that is not a mapping yields the defaults. Keys that are not
    canonical are kept in ``metadata`` along with ``originalPrice``, the
    price exactly as it arrived.
    """
    if isinstance(raw, str):
        name = raw.strip() or DEFAULT_NAME
        return ProductData(name=name, price=DEFAULT_PRICE, metadata={"originalPrice": None})
    if not isinstance(raw, Mapping):
        return ProductData(name=DEFAULT_NAME, price=DEFAULT_PRICE, metadata={"originalPrice": None})

    index: Dict[str, List[str]] = {}
    for key in raw:
        index.setdefault(norm_key(key), []).append(key)

    name = _as_text(_lookup(raw, index, FIELD_ALIASES["name"])) or DEFAULT_NAME

    raw_price = _lookup(raw, index, FIELD_ALIASES["price"])
    price = DEFAULT_PRICE
    if not _missing(raw_price):
        currency = _lookup(raw, index, CURRENCY_KEYS)
        if currency and is_bare_amount(raw_price):
            price = format_price(str(raw_price).strip(), currency)
        else:
            price = raw_price if isinstance(raw_price, str) else str(raw_price)

    origin = _lookup(raw, index, ORIGIN_KEYS) or store_url
    image_url = resolve_url(_as_text(_lookup(raw, index, FIELD_ALIASES["imageUrl"])), origin)
    url = resolve_url(_as_text(_lookup(raw, index, FIELD_ALIASES["url"])), origin)

    metadata: Dict[str, Any] = {}
    nested = raw.get("metadata")
    if isinstance(nested, Mapping):
        metadata.update({k: v for k, v in nested.items() if k not in CANONICAL_FIELDS})
    for key, value in raw.items():
        if key in CANONICAL_FIELDS or key == "metadata" or value is None:
            continue
        metadata[key] = value
    metadata["originalPrice"] = raw_price

    return ProductData(
        name=name,
        price=price,
        image_url=image_url,
        description=_as_text(_lookup(raw, index, FIELD_ALIASES["description"])),
        url=url,
        category=_as_text(_lookup(raw, index, FIELD_ALIASES["category"])),
        metadata=metadata,
    )


def normalize_all(records: Iterable[Any], store_url: Optional[str] = None) -> List[ProductData]:
    return [normalize(r, store_url) for r in records]
