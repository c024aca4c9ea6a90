import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import ValidationError
from ...schema import ScrapeRequest, ScrapeResult
from ...scrape import ScrapeService
from ..dependencies import get_service

logger = logging.getLogger(__name__)
router = APIRouter()

SCRAPE_FAILED = (
    "Failed to scrape store. The website might be using advanced protections "
    "against scraping or is not structured in a way we can parse."
)


@router.post("/scrape", response_model=ScrapeResult)
def scrape_store(request: ScrapeRequest, service: ScrapeService = Depends(get_service)):
    """
    Scrape one store listing page, serving the cached result when it is
    less than an hour old.
    """
    logger.info("[API] scrape request for %s", request.store_url)
    try:
        return service.scrape(request.store_url)
    except ValidationError:
        raise
    except Exception as exc:
        logger.exception("[API] scraping %s failed", request.store_url)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": SCRAPE_FAILED, "error": str(exc)},
        ) from exc
