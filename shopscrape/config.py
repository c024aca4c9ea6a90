import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, ValidationError

# Cached scrape results are served for this long; not configurable.
CACHE_TTL = timedelta(hours=1)


class Settings(BaseModel):
    env: str = Field(default="local", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    render_api_key: Optional[str] = Field(default=None, alias="SCRAPE_DO_API_KEY")
    render_api_url: str = Field(default="https://api.scrape.do/", alias="SCRAPE_DO_URL")
    fetch_timeout: float = Field(default=30.0, gt=0, alias="FETCH_TIMEOUT")

    storage_backend: Literal["memory", "file", "supabase"] = Field(default="memory", alias="STORAGE_BACKEND")
    data_dir: Path = Field(default=Path("data"), alias="DATA_DIR")
    supabase_url: Optional[HttpUrl] = Field(default=None, alias="SUPABASE_URL")
    supabase_key: Optional[str] = Field(default=None, alias="SUPABASE_SERVICE_KEY")


def _load_dotenv():
    # Load from repo root if present, otherwise rely on environment variables.
    root_env = Path(__file__).resolve().parents[1] / ".env"
    if root_env.exists():
        load_dotenv(root_env)
    else:
        load_dotenv()


@lru_cache()
def get_settings() -> Settings:
    _load_dotenv()
    try:
        return Settings(**os.environ)
    except ValidationError as exc:
        bad = [str(e["loc"][0]) for e in exc.errors()]
        detail = f"Invalid environment variables: {', '.join(bad)}"
        raise RuntimeError(detail) from exc
