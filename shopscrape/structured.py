"""
schema.org JSON-LD fallback for pages whose markup defeats the DOM heuristics.
"""
import json
import logging
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup

from .currency import format_price
from .errors import ParseError

logger = logging.getLogger(__name__)


def _first(value):
    return value[0] if isinstance(value, list) and value else value


def _is_type(node: Any, type_name: str) -> bool:
    if not isinstance(node, dict):
        return False
    t = node.get("@type")
    return t == type_name or (isinstance(t, list) and type_name in t)


def load_block(text: Optional[str]) -> Any:
    try:
        return json.loads(text or "")
    except (TypeError, ValueError) as exc:
        raise ParseError(f"invalid JSON-LD block: {exc}") from exc


def _top_level_nodes(data: Any) -> Iterator[Dict[str, Any]]:
    # A block may be a single node, a list of nodes or an @graph container.
    if isinstance(data, list):
        for node in data:
            yield from _top_level_nodes(node)
    elif isinstance(data, dict):
        if isinstance(data.get("@graph"), list):
            yield from _top_level_nodes(data["@graph"])
        if "@type" in data:
            yield data


def offer_price(offers: Any) -> Optional[str]:
    """Price string with currency symbol from an ``offers`` value, or None."""
    offer = _first(offers)
    if not isinstance(offer, dict):
        return None
    price_spec = offer.get("priceSpecification")
    price_spec = _first(price_spec) if price_spec else None
    value = offer.get("price")
    if value in (None, "") and isinstance(price_spec, dict):
        value = price_spec.get("price")
    if value in (None, ""):
        value = offer.get("lowPrice")
    if value in (None, ""):
        return None
    currency = offer.get("priceCurrency")
    if not currency and isinstance(price_spec, dict):
        currency = price_spec.get("priceCurrency")
    return format_price(value, currency)


def product_record(node: Dict[str, Any], page_url: Optional[str] = None) -> Dict[str, Any]:
    product: Dict[str, Any] = {"name": node.get("name")}
    if page_url:
        product["storeUrl"] = page_url

    offers = node.get("offers")
    if offers:
        price = offer_price(offers)
        if price:
            product["price"] = price
        first_offer = _first(offers)
        if isinstance(first_offer, dict) and first_offer.get("priceCurrency"):
            product["priceCurrency"] = first_offer["priceCurrency"]

    image = _first(node.get("image"))
    if isinstance(image, dict):
        image = image.get("url")
    if image:
        product["imageUrl"] = image

    if node.get("description"):
        product["description"] = node["description"]
    if node.get("url"):
        product["url"] = node["url"]
    if node.get("category"):
        product["category"] = node["category"]
    return product


def _item_list_products(node: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    elements = node.get("itemListElement")
    if not isinstance(elements, list):
        return
    for element in elements:
        item = element.get("item") if isinstance(element, dict) and "item" in element else element
        if _is_type(item, "Product"):
            yield item


def _block_records(data: Any, page_url: Optional[str]) -> List[Dict[str, Any]]:
    records: List[Dict[str, Any]] = []
    try:
        for node in _top_level_nodes(data):
            if _is_type(node, "Product"):
                records.append(product_record(node, page_url))
            elif _is_type(node, "ItemList"):
                for item in _item_list_products(node):
                    records.append(product_record(item, page_url))
    except (AttributeError, KeyError, TypeError) as exc:
        raise ParseError(f"unexpected JSON-LD shape: {exc}") from exc
    return records


def extract_structured(soup: BeautifulSoup, page_url: Optional[str] = None) -> List[Dict[str, Any]]:
    """Raw product records from every ld+json block, in document/array order."""
    records: List[Dict[str, Any]] = []
    scripts = soup.find_all("script", type=lambda t: t and "ld+json" in t)
    for idx, tag in enumerate(scripts):
        try:
            data = load_block(tag.string or tag.get_text())
            records.extend(_block_records(data, page_url))
        except ParseError as exc:
            logger.warning("[JSONLD] skipping block %d on %s: %s", idx, page_url, exc)
            continue

    logger.info("[JSONLD] %d blocks, %d product records", len(scripts), len(records))
    return records
