from types import ModuleType
from typing import Optional
from urllib.parse import urljoin, urlsplit

import tldextract

from .adapters import (
    adapter_amazon,
    adapter_bestbuy,
    adapter_ebay,
    adapter_generic,
    adapter_target,
    adapter_walmart,
)

# Bundled public-suffix snapshot only; never reach out to the network.
_extract = tldextract.TLDExtract(suffix_list_urls=())

ADAPTERS = {
    "amazon": adapter_amazon,
    "walmart": adapter_walmart,
    "bestbuy": adapter_bestbuy,
    "target": adapter_target,
    "ebay": adapter_ebay,
    # add more site families here...
}

GENERIC = adapter_generic


def host_family(url: str) -> str:
    """``https://www.amazon.co.uk/s?k=x`` -> ``amazon``."""
    parts = _extract(url)
    if parts.domain:
        return parts.domain.lower()
    return (urlsplit(url).hostname or "").lower()


def pick_adapter(url: Optional[str]) -> Optional[ModuleType]:
    if not url:
        return None
    return ADAPTERS.get(host_family(url))


def needs_render(url: str) -> bool:
    adapter = pick_adapter(url)
    return bool(adapter and adapter.NEEDS_RENDER)


def store_name_for(url: str) -> str:
    """Display name from the registrable domain, e.g. ``Bestbuy``."""
    family = host_family(url)
    if not family:
        return url
    return family[:1].upper() + family[1:]


def favicon_for(url: str) -> str:
    return f"https://www.google.com/s2/favicons?domain={url}&sz=128"


def origin_of(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def resolve_url(value: Optional[str], base_url: Optional[str]) -> Optional[str]:
    """Make ``value`` absolute against the origin of ``base_url``; absolute values pass through."""
    if not value:
        return value
    value = value.strip()
    if value.startswith("http"):
        return value
    origin = origin_of(base_url)
    if origin is None:
        return value
    return urljoin(origin + "/", value)
