"""
Per-container field extraction.

Each field has its own ordered cascade of rules (see rules.py). Prices are
kept exactly as the page prints them; nothing is parsed into numbers here.
"""
import logging
from typing import Any, Dict, List, Optional

from bs4 import Tag

from .currency import PRICE_RE, find_price, looks_like_price
from .rules import Rule, first_match
from .sites import resolve_url

logger = logging.getLogger(__name__)

NAME_MAX_OWN_TEXT = 100

NAME_SELECTORS = [
    "h1", "h2", "h3", "h4", "h5",
    ".product-name", ".product-title", ".item-title",
    ".name", ".title",
    "[class*='title']", "[class*='name']",
    "a[title]",
]

PRICE_SELECTORS = [
    ".price", "[class*='price']", ".amount", "[class*='cost']", "[class*='amount']",
    ".current-price", ".product-price", ".sale-price", ".discounted-price",
    ".a-price", ".a-offscreen", ".price_color", ".product_price",
    "[itemprop='price']",
]

WAS_PRICE_SELECTORS = [
    ".original-price", ".was-price", ".regular-price", ".old-price",
    "[class*='original']", "[class*='was']", "[class*='regular']", "[class*='old']",
    "del", "s", "strike",
]

DESCRIPTION_SELECTORS = [
    "[itemprop='description']",
    ".product-description", ".description",
    "[class*='description']", "[class*='desc']",
]

CATEGORY_SELECTORS = [
    "[itemprop='category']",
    ".product-category", ".category",
    "[class*='category']",
]

IMAGE_ATTRS = ["src", "data-src", "data-original"]


def _text(node: Optional[Tag]) -> str:
    return node.get_text().strip() if node is not None else ""


# ------------------------------------------------------------------ #
# name
# ------------------------------------------------------------------ #
def _selector_text(selector: str):
    def extract(el: Tag) -> str:
        for node in el.select(selector):
            text = _text(node) or (node.get("title") or "").strip()
            if text:
                return text
        return ""
    return extract


def _image_alt(el: Tag) -> str:
    img = el.find("img", alt=True)
    return (img.get("alt") or "").strip() if img is not None else ""


def _own_short_text(el: Tag) -> str:
    text = _text(el)
    return text if len(text) < NAME_MAX_OWN_TEXT else ""


NAME_RULES = (
    [Rule(f"name:{sel}", _selector_text(sel)) for sel in NAME_SELECTORS]
    + [Rule("name:img-alt", _image_alt), Rule("name:own-text", _own_short_text)]
)


# ------------------------------------------------------------------ #
# price
# ------------------------------------------------------------------ #
def _price_by_selector(selector: str):
    def extract(el: Tag):
        for node in el.select(selector):
            text = _text(node)
            if text and looks_like_price(text):
                return text, node
        return None
    return extract


def _is_leafish(node: Tag) -> bool:
    children = node.find_all(True, recursive=False)
    return not children or children[0].name == "span"


def _price_in_leaf(el: Tag):
    for node in el.find_all(True):
        match = find_price(_text(node))
        if match and _is_leafish(node):
            return match, node
    return None


def _price_in_text(el: Tag):
    match = find_price(el.get_text())
    return (match, None) if match else None


PRICE_RULES = (
    [Rule(f"price:{sel}", _price_by_selector(sel)) for sel in PRICE_SELECTORS]
    + [Rule("price:leaf", _price_in_leaf), Rule("price:text", _price_in_text)]
)


def _was_price(price_node: Optional[Tag], price: str) -> Optional[str]:
    """Struck-through / "was" price that sits next to the current price."""
    if price_node is None or price_node.parent is None:
        return None
    scope = price_node.parent
    for sel in WAS_PRICE_SELECTORS:
        for node in scope.select(sel):
            if node is price_node:
                continue
            text = _text(node)
            if text and text != price and PRICE_RE.search(text):
                return text
    return None


# ------------------------------------------------------------------ #
# image / url / description / category
# ------------------------------------------------------------------ #
def image_source(img: Optional[Tag]) -> Optional[str]:
    if img is None:
        return None
    for attr in IMAGE_ATTRS:
        value = (img.get(attr) or "").strip()
        if value:
            return value
    srcset = (img.get("srcset") or "").strip()
    if srcset:
        first = srcset.split(",")[0].strip()
        return first.split()[0] if first else None
    return None


def _link_target(el: Tag) -> Optional[str]:
    if el.name == "a" and el.get("href"):
        return el["href"].strip()
    anchor = el.find("a", href=True)
    return anchor["href"].strip() if anchor is not None else None


def _plain_selector_text(selector: str):
    def extract(el: Tag) -> str:
        return _text(el.select_one(selector))
    return extract


DESCRIPTION_RULES = [Rule(f"description:{sel}", _plain_selector_text(sel)) for sel in DESCRIPTION_SELECTORS]

CATEGORY_RULES = (
    [Rule(f"category:{sel}", _plain_selector_text(sel)) for sel in CATEGORY_SELECTORS]
    + [
        Rule(
            "category:data-attr",
            lambda el: (el.get("data-category") or "").strip(),
            predicate=lambda el: el.has_attr("data-category"),
        )
    ]
)


# ------------------------------------------------------------------ #
# public
# ------------------------------------------------------------------ #
def extract_fields(el: Tag, page_url: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Pull one raw product record out of a container node.

    Returns ``None`` when none of name, price or image could be found; such
    nodes are not products and are dropped silently.
    """
    product: Dict[str, Any] = {}
    if page_url:
        product["storeUrl"] = page_url

    name = first_match(NAME_RULES, el)
    if name:
        product["name"] = name

    price_hit = first_match(PRICE_RULES, el)
    if price_hit:
        price, price_node = price_hit
        product["price"] = price
        was = _was_price(price_node, price)
        if was:
            product["wasPrice"] = was

    img = image_source(el.find("img"))
    if img:
        product["imageUrl"] = img

    href = _link_target(el)
    if href:
        product["url"] = resolve_url(href, page_url)

    description = first_match(DESCRIPTION_RULES, el)
    if description:
        product["description"] = description

    category = first_match(CATEGORY_RULES, el)
    if category:
        product["category"] = category

    if not (product.get("name") or product.get("price") or product.get("imageUrl")):
        return None
    return product


def extract_all(containers: List[Tag], page_url: Optional[str] = None) -> List[Dict[str, Any]]:
    records = []
    for el in containers:
        record = extract_fields(el, page_url)
        if record is not None:
            records.append(record)
    logger.info("[EXTRACT] %d/%d containers produced records", len(records), len(containers))
    return records
