import pytest

from shopscrape.config import Settings, get_settings
from shopscrape.supabase_client import make_supabase


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults():
    s = Settings()
    assert s.storage_backend == "memory"
    assert s.render_api_key is None
    assert s.fetch_timeout == 30.0


def test_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", "file")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("SCRAPE_DO_API_KEY", "secret")
    s = get_settings()
    assert s.storage_backend == "file"
    assert s.data_dir == tmp_path
    assert s.render_api_key == "secret"


def test_invalid_environment_names_the_variable(monkeypatch):
    monkeypatch.setenv("FETCH_TIMEOUT", "-1")
    with pytest.raises(RuntimeError, match="FETCH_TIMEOUT"):
        get_settings()


def test_supabase_needs_credentials():
    with pytest.raises(RuntimeError, match="SUPABASE_URL"):
        make_supabase(Settings(STORAGE_BACKEND="supabase"))


def test_supabase_placeholder_url_rejected():
    s = Settings(SUPABASE_URL="https://your-project.supabase.co", SUPABASE_SERVICE_KEY="k")
    with pytest.raises(RuntimeError, match="placeholder"):
        make_supabase(s)
