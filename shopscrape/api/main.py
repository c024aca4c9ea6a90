import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings, get_settings
from ..errors import ValidationError
from ..scrape import build_service
from .routers import scrape, stores

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.log_level.upper())
        app.state.service = build_service(settings)
        yield

    app = FastAPI(title="Shopscrape API", version="0.1.0", lifespan=lifespan)

    @app.get("/health")
    def healthcheck():
        return {"status": "ok", "env": settings.env}

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        # Routers raise with a dict detail; send it as the body itself.
        content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid input data", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(ValidationError)
    async def _invalid_input(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid input data", "errors": [str(exc)]},
        )

    app.include_router(stores.router, prefix="/api", tags=["stores"])
    app.include_router(scrape.router, prefix="/api", tags=["scrape"])
    return app


def jsonable_errors(exc: RequestValidationError):
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]


app = create_app()
