import logging

from fastapi import APIRouter, HTTPException, status, Query, Path, Response

from deals.auth.dependencies import CurrentActorDep
from deals.auth.exceptions import AuthorizationException, to_http_exception
from deals.config import settings
from deals.products.dependencies import CatalogServiceDep
from deals.products.exceptions import (
    CatalogImportException,
    LotNotFoundException,
    MalformedLotException,
)
from deals.products.models import (
    CatalogImport,
    CatalogImportResult,
    PaginatedProductLotRead,
    ProductLotImageUpdate,
    ProductLotRead,
)

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=PaginatedProductLotRead)
async def list_lots(
    catalog_service: CatalogServiceDep,
    current_actor: CurrentActorDep,
    response: Response,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Liste les lots disponibles, triés par catégorie."""
    try:
        page = await catalog_service.list_lots(limit=limit, offset=offset)
    except MalformedLotException as e:
        logger.error(f"Erreur API list_lots: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Catalogue invalide.")
    end_range = offset + len(page.items) - 1 if page.items else offset
    response.headers["Content-Range"] = f"products {offset}-{end_range}/{page.total}"
    return page

@router.get("/{lot_id}", response_model=ProductLotRead)
async def read_lot(
    catalog_service: CatalogServiceDep,
    current_actor: CurrentActorDep,
    lot_id: int = Path(..., ge=1),
):
    try:
        return await catalog_service.get_lot(lot_id)
    except LotNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except MalformedLotException as e:
        logger.error(f"Erreur API read_lot {lot_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Lot invalide.")

@router.post("/import", response_model=CatalogImportResult)
async def import_catalog(
    catalog: CatalogImport,
    catalog_service: CatalogServiceDep,
    current_actor: CurrentActorDep,
):
    """Remplace le catalogue par les lignes fournies (admin)."""
    logger.info(f"API import_catalog: {len(catalog.lots)} lot(s) par user {current_actor.user_id}")
    try:
        return await catalog_service.import_catalog(catalog, current_actor)
    except AuthorizationException as e:
        raise to_http_exception(e)
    except CatalogImportException as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

@router.patch("/{lot_id}/image", response_model=ProductLotRead)
async def attach_lot_image(
    image: ProductLotImageUpdate,
    catalog_service: CatalogServiceDep,
    current_actor: CurrentActorDep,
    lot_id: int = Path(..., ge=1),
):
    """Associe une image à un lot (admin)."""
    try:
        return await catalog_service.attach_image(lot_id, image.image_url, current_actor)
    except AuthorizationException as e:
        raise to_http_exception(e)
    except LotNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

product_router = router
