import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from deals.database import get_db_session
from deals.products.interfaces.repositories import AbstractProductLotRepository
from deals.products.repositories import SQLAlchemyProductLotRepository
from deals.products.service import CatalogService

logger = logging.getLogger(__name__)

def get_lot_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractProductLotRepository:
    """Fournit le repository du catalogue (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyProductLotRepository")
    return SQLAlchemyProductLotRepository(db_session=session)

LotRepositoryDep = Annotated[AbstractProductLotRepository, Depends(get_lot_repository)]

def get_catalog_service(lot_repo: LotRepositoryDep) -> CatalogService:
    logger.debug("Fourniture de CatalogService")
    return CatalogService(lot_repo=lot_repo)

CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
