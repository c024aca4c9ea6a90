import pytest
import requests

from shopscrape.config import Settings
from shopscrape.errors import FetchError
from shopscrape.fetcher import DirectFetcher, FallbackFetcher, RenderServiceFetcher, build_fetcher


class _Response:
    def __init__(self, status_code=200, text="<html></html>", reason="OK"):
        self.status_code = status_code
        self.text = text
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400


class _Session:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_direct_fetch_sends_browser_headers():
    session = _Session(_Response(text="<p>hi</p>"))
    html = DirectFetcher(timeout=12, session=session).fetch("https://shop.example/")

    assert html == "<p>hi</p>"
    url, kwargs = session.calls[0]
    assert url == "https://shop.example/"
    assert kwargs["timeout"] == 12
    assert kwargs["headers"]["User-Agent"].startswith("Mozilla/5.0")
    assert kwargs["headers"]["Referer"] == "https://www.google.com/"


def test_non_success_status_is_fetch_error():
    session = _Session(_Response(status_code=403, reason="Forbidden"))
    with pytest.raises(FetchError) as exc:
        DirectFetcher(session=session).fetch("https://shop.example/")
    assert exc.value.status == 403
    assert "403" in str(exc.value)


@pytest.mark.parametrize("error", [requests.Timeout("slow"), requests.ConnectionError("refused")])
def test_transport_errors_are_fetch_errors(error):
    with pytest.raises(FetchError):
        DirectFetcher(session=_Session(error)).fetch("https://shop.example/")


def test_render_service_params():
    session = _Session(_Response(text="rendered"))
    fetcher = RenderServiceFetcher("key123456", base_url="https://api.scrape.do", session=session)

    assert fetcher.fetch("https://shop.example/all") == "rendered"
    url, kwargs = session.calls[0]
    assert url == "https://api.scrape.do/fetch"
    assert kwargs["params"] == {"api_key": "key123456", "url": "https://shop.example/all"}


def test_render_service_asks_for_browser_on_render_sites():
    session = _Session(_Response())
    RenderServiceFetcher("k", session=session).fetch("https://www.bestbuy.com/site/searchpage.jsp?st=tv")
    params = session.calls[0][1]["params"]
    assert params["render"] == "true"
    assert params["browser"] == "true"


class _Stub:
    def __init__(self, result):
        self.result = result
        self.calls = 0

    def fetch(self, url):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def test_fallback_makes_a_single_direct_attempt():
    primary = _Stub(FetchError("render service down"))
    secondary = _Stub("<html>direct</html>")
    assert FallbackFetcher(primary, secondary).fetch("https://shop.example/") == "<html>direct</html>"
    assert (primary.calls, secondary.calls) == (1, 1)


def test_fallback_not_used_when_primary_succeeds():
    primary = _Stub("<html>rendered</html>")
    secondary = _Stub("<html>direct</html>")
    assert FallbackFetcher(primary, secondary).fetch("https://shop.example/") == "<html>rendered</html>"
    assert secondary.calls == 0


def test_both_failing_raises():
    primary = _Stub(FetchError("render service down"))
    secondary = _Stub(FetchError("direct also down"))
    with pytest.raises(FetchError, match="direct also down"):
        FallbackFetcher(primary, secondary).fetch("https://shop.example/")
    assert secondary.calls == 1


def test_build_fetcher_depends_on_api_key():
    assert isinstance(build_fetcher(Settings()), DirectFetcher)
    fetcher = build_fetcher(Settings(SCRAPE_DO_API_KEY="abc", FETCH_TIMEOUT="5"))
    assert isinstance(fetcher, FallbackFetcher)
    assert isinstance(fetcher.primary, RenderServiceFetcher)
    assert fetcher.primary.timeout == 5
