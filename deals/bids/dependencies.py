import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from deals.bids.interfaces.repositories import AbstractBidRepository
from deals.bids.repositories import SQLAlchemyBidRepository
from deals.bids.service import BidService
from deals.config import settings
from deals.database import get_db_session
from deals.notifications.dependencies import BidEventBusDep
from deals.products.dependencies import LotRepositoryDep

logger = logging.getLogger(__name__)

def get_bid_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> AbstractBidRepository:
    """Fournit le repository des enchères (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyBidRepository")
    return SQLAlchemyBidRepository(db_session=session)

BidRepositoryDep = Annotated[AbstractBidRepository, Depends(get_bid_repository)]

def get_bid_service(
    bid_repo: BidRepositoryDep,
    lot_repo: LotRepositoryDep,
    event_bus: BidEventBusDep,
) -> BidService:
    """Fournit le service du cycle de vie des enchères avec ses dépendances injectées."""
    logger.debug("Fourniture de BidService")
    return BidService(
        bid_repo=bid_repo,
        lot_repo=lot_repo,
        event_bus=event_bus,
        enforce_close_bid_date=settings.ENFORCE_CLOSE_BID_DATE,
        enforce_case_quantity=settings.ENFORCE_CASE_QUANTITY,
    )

BidServiceDep = Annotated[BidService, Depends(get_bid_service)]
