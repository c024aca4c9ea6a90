"""
Page fetchers.

``PageFetcher.fetch(url) -> str`` returns raw markup or raises FetchError.
The render service is tried first when an API key is configured; if it
fails, exactly one direct request is made before the run is given up.
"""
import logging
from typing import Optional, Protocol

import requests

from .config import Settings
from .errors import FetchError
from .sites import needs_render

logger = logging.getLogger(__name__)

UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"

BROWSER_HEADERS = {
    "User-Agent": UA,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Referer": "https://www.google.com/",
}

DEFAULT_TIMEOUT = 30.0


class PageFetcher(Protocol):
    def fetch(self, url: str) -> str: ...


def _mask(key: str) -> str:
    if not key:
        return "Not provided"
    return f"{key[:3]}...{key[-3:]}"


def _get(session, url: str, timeout: float, **kwargs) -> str:
    try:
        resp = session.get(url, timeout=timeout, **kwargs)
    except requests.Timeout as exc:
        raise FetchError(f"Timed out after {timeout:g}s fetching {url}", url=url) from exc
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch {url}: {exc}", url=url) from exc
    if not resp.ok:
        raise FetchError(
            f"Failed to fetch store data: {resp.status_code} {resp.reason or ''}".strip(),
            url=url,
            status=resp.status_code,
        )
    return resp.text


class DirectFetcher:
    """Plain GET with browser-like headers."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str) -> str:
        logger.info("[FETCH] direct → %s", url)
        html = _get(self.session, url, self.timeout, headers=BROWSER_HEADERS)
        logger.info("[FETCH] direct ok (%d characters)", len(html))
        return html


class RenderServiceFetcher:
    """scrape.do style API: ``GET <base>fetch?api_key=…&url=…[&render=true&browser=true]``."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.scrape.do/",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str) -> str:
        params = {"api_key": self.api_key, "url": url}
        if needs_render(url):
            params.update(render="true", browser="true")
        logger.info("[FETCH] render service → %s (key %s, render=%s)", url, _mask(self.api_key), "render" in params)
        try:
            html = _get(
                self.session,
                f"{self.base_url}fetch",
                self.timeout,
                params=params,
                headers={"Accept": "text/html,application/xhtml+xml"},
            )
        except FetchError as exc:
            raise FetchError(f"Failed to scrape using render service: {exc}", url=url, status=exc.status) from exc
        logger.info("[FETCH] render service ok (%d characters)", len(html))
        return html


class FallbackFetcher:
    def __init__(self, primary: PageFetcher, secondary: PageFetcher):
        self.primary = primary
        self.secondary = secondary

    def fetch(self, url: str) -> str:
        try:
            return self.primary.fetch(url)
        except FetchError as exc:
            logger.error("[FETCH] primary fetcher failed, falling back to direct fetch: %s", exc)
        return self.secondary.fetch(url)


def build_fetcher(settings: Settings, session: Optional[requests.Session] = None) -> PageFetcher:
    direct = DirectFetcher(timeout=settings.fetch_timeout, session=session)
    if not settings.render_api_key:
        logger.warning("[FETCH] SCRAPE_DO_API_KEY is not set; using direct fetching only")
        return direct
    render = RenderServiceFetcher(
        settings.render_api_key,
        base_url=settings.render_api_url,
        timeout=settings.fetch_timeout,
        session=session,
    )
    return FallbackFetcher(render, direct)
