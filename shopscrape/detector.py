"""
Product container detection.

A listing page is searched tier by tier; the first tier that yields at least
one node decides the container set:

1. site catalog      -- selectors known for the page's site family
2. generic catalog   -- broad product/item/card/grid-cell selectors
3. price clustering  -- ancestors of price-looking text, majority tag wins
4. last resort       -- any div/li/article holding an image and some text

Nodes nested inside another selected node are dropped so that a product
card is never reported twice.
"""
import logging
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from .currency import PRICE_RE
from .rules import Rule, first_rule
from .sites import GENERIC, pick_adapter

logger = logging.getLogger(__name__)

# How far above a price text node we look for the card that holds it.
CLUSTER_ANCESTOR_LEVELS = 4
_STOP_TAGS = {"html", "body", "[document]"}
_SKIP_TEXT_IN = {"script", "style", "noscript", "template"}
LAST_RESORT_TAGS = ["div", "li", "article"]


def _select_first_hit(soup: BeautifulSoup, selectors: Sequence[str]) -> List[Tag]:
    for sel in selectors:
        found = soup.select(sel)
        if found:
            logger.debug("[DETECT] selector %r matched %d nodes", sel, len(found))
            return found
    return []


def site_catalog(soup: BeautifulSoup, page_url: Optional[str] = None) -> List[Tag]:
    adapter = pick_adapter(page_url)
    if adapter is None:
        return []
    return _select_first_hit(soup, adapter.CONTAINER_SELECTORS)


def generic_catalog(soup: BeautifulSoup, page_url: Optional[str] = None) -> List[Tag]:
    return _select_first_hit(soup, GENERIC.CONTAINER_SELECTORS)


def price_clusters(soup: BeautifulSoup, page_url: Optional[str] = None) -> List[Tag]:
    """
    Group the ancestors of every price-looking text node by tag name and keep
    the largest group. Repeated product cards share a tag, so the majority
    tag is a good guess for the card element. Ties go to the tag seen first.
    """
    root = soup.body or soup
    groups: Dict[str, List[Tag]] = {}
    seen = set()

    for text in root.find_all(string=PRICE_RE):
        node = text.parent
        if node is None or node.name in _SKIP_TEXT_IN:
            continue
        for _ in range(CLUSTER_ANCESTOR_LEVELS):
            node = node.parent if node is not None else None
            if node is None or node.name in _STOP_TAGS:
                break
            if id(node) in seen:
                continue
            seen.add(id(node))
            groups.setdefault(node.name, []).append(node)

    best: List[Tag] = []
    for members in groups.values():
        if len(members) > len(best):
            best = members
    if best:
        logger.debug("[DETECT] price clustering picked <%s> x%d", best[0].name, len(best))
    return best


def image_and_text(soup: BeautifulSoup, page_url: Optional[str] = None) -> List[Tag]:
    root = soup.body or soup
    return [
        el
        for el in root.find_all(LAST_RESORT_TAGS)
        if el.find("img") is not None and el.get_text(strip=True)
    ]


TIERS = [
    Rule("site", lambda ctx: site_catalog(*ctx)),
    Rule("generic", lambda ctx: generic_catalog(*ctx)),
    Rule("cluster", lambda ctx: price_clusters(*ctx)),
    Rule("last-resort", lambda ctx: image_and_text(*ctx)),
]


def drop_nested(nodes: Sequence[Tag]) -> List[Tag]:
    """Keep document order, skip duplicates and nodes inside another selected node."""
    selected = {id(n) for n in nodes}
    out: List[Tag] = []
    emitted = set()
    for node in nodes:
        if id(node) in emitted:
            continue
        if any(id(parent) in selected for parent in node.parents):
            continue
        emitted.add(id(node))
        out.append(node)
    return out


def detect_containers(soup: BeautifulSoup, page_url: Optional[str] = None) -> List[Tag]:
    hit = first_rule(TIERS, (soup, page_url))
    if not hit:
        logger.info("[DETECT] no container candidates on %s", page_url)
        return []
    tier, nodes = hit
    containers = drop_nested(nodes)
    logger.info("[DETECT] tier=%s candidates=%d containers=%d", tier, len(nodes), len(containers))
    return containers
