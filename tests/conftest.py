from datetime import datetime, timedelta, timezone

import pytest

from shopscrape.cache import ScrapeCache
from shopscrape.errors import FetchError
from shopscrape.scrape import ScrapeService
from shopscrape.storage import MemoryCacheStore, MemoryProductRepository, MemoryStoreDirectory

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

LISTING_HTML = """
<html><body>
  <div class="product">
    <a href="/p/1"><img src="/img/1.jpg" alt="Desk Lamp"></a>
    <h3>Desk Lamp</h3>
    <span class="price">$19.99</span>
  </div>
  <div class="product">
    <a href="https://shop.example/p/2"><img data-src="//cdn.example/2.jpg"></a>
    <h3>Floor Lamp</h3>
    <span class="price">$49.00</span>
  </div>
</body></html>
"""


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeFetcher:
    def __init__(self, html: str = LISTING_HTML, error: Exception = None):
        self.html = html
        self.error = error
        self.calls = []

    def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.html


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def service(clock, fetcher):
    return ScrapeService(
        stores=MemoryStoreDirectory(),
        cache=ScrapeCache(MemoryCacheStore(), clock=clock),
        products=MemoryProductRepository(),
        fetcher=fetcher,
    )


@pytest.fixture
def failing_fetcher():
    return FakeFetcher(error=FetchError("Failed to fetch store data: 503 Service Unavailable", status=503))
