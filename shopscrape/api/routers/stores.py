import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...schema import ProductRow, Store, StoreCreate
from ...scrape import ScrapeService
from ..dependencies import get_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/stores", response_model=List[Store])
def list_stores(service: ScrapeService = Depends(get_service)):
    try:
        return service.list_stores()
    except Exception as exc:
        logger.exception("[API] listing stores failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to fetch stores"},
        ) from exc


@router.post("/stores", response_model=Store, status_code=status.HTTP_201_CREATED)
def create_store(body: StoreCreate, response: Response, service: ScrapeService = Depends(get_service)):
    """Register a store; an already known URL returns the existing record with 200."""
    store, created = service.create_store(body)
    if not created:
        response.status_code = status.HTTP_200_OK
    return store


@router.get("/stores/{store_id}/products", response_model=List[ProductRow])
def list_products(store_id: str, service: ScrapeService = Depends(get_service)):
    try:
        sid = int(store_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid store ID"},
        )
    try:
        return service.list_products(sid)
    except Exception as exc:
        logger.exception("[API] listing products for store %s failed", sid)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to fetch products"},
        ) from exc
