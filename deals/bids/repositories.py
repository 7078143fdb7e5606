import logging
from typing import Optional, List, Tuple, Dict, Any
from datetime import datetime, timezone

from fastcrud import FastCRUD
from sqlalchemy import update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from deals.bids.models import Bid, BidRead, BidStatus
from deals.bids.interfaces.repositories import AbstractBidRepository

logger = logging.getLogger(__name__)


class SQLAlchemyBidRepository(AbstractBidRepository):
    """Implémentation SQLAlchemy du repository des enchères."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Bid)

    async def get_by_id(self, *, bid_id: int) -> Optional[BidRead]:
        bid_db = await self.db.get(Bid, bid_id, populate_existing=True)
        if not bid_db:
            logger.debug(f"Enchère ID {bid_id} non trouvée dans get_by_id().")
            return None
        return BidRead.model_validate(bid_db)

    async def _list(self, *, offset: int, limit: int, **filters: Any) -> Tuple[List[BidRead], int]:
        result: Dict[str, Any] = await self.crud.get_multi(
            db=self.db,
            offset=offset,
            limit=limit,
            sort_columns=["created_at", "id"],
            sort_orders=["desc", "desc"],
            **filters,
        )
        bids = [BidRead.model_validate(row) for row in result.get("data", [])]
        return bids, result.get("total_count", len(bids))

    async def list_by_user_id(self, *, user_id: int, offset: int = 0, limit: int = 100) -> Tuple[List[BidRead], int]:
        return await self._list(offset=offset, limit=limit, user_id=user_id)

    async def list_all(
        self, *, offset: int = 0, limit: int = 100, status: Optional[BidStatus] = None
    ) -> Tuple[List[BidRead], int]:
        if status is None:
            return await self._list(offset=offset, limit=limit)
        return await self._list(offset=offset, limit=limit, status=status.value)

    async def add(self, *, bid_data: Dict[str, Any]) -> BidRead:
        bid_db = Bid(**bid_data)
        self.db.add(bid_db)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Erreur intégrité ajout enchère pour user {bid_data.get('user_id')}: {e}", exc_info=True)
            raise
        await self.db.refresh(bid_db)
        logger.info(f"Enchère ID {bid_db.id} ajoutée pour user {bid_db.user_id} sur lot {bid_db.product_id}.")
        return BidRead.model_validate(bid_db)

    async def update_status_if(
        self, *, bid_id: int, expected_status: BidStatus, new_status: BidStatus
    ) -> Optional[BidRead]:
        statement = (
            update(Bid)
            .where(Bid.id == bid_id, Bid.status == expected_status.value)
            .values(status=new_status.value, decided_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(statement)
            if result.rowcount != 1:
                await self.db.rollback()
                logger.warning(f"MAJ statut enchère {bid_id} ignorée: statut stocké différent de '{expected_status.value}'.")
                return None
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Erreur MAJ statut enchère {bid_id}: {e}", exc_info=True)
            raise

        logger.info(f"Statut enchère ID {bid_id} mis à jour: '{expected_status.value}' -> '{new_status.value}'.")
        return await self.get_by_id(bid_id=bid_id)

    async def delete_if(self, *, bid_id: int, expected_status: Optional[BidStatus] = None) -> bool:
        statement = delete(Bid).where(Bid.id == bid_id)
        if expected_status is not None:
            statement = statement.where(Bid.status == expected_status.value)
        statement = statement.execution_options(synchronize_session=False)
        try:
            result = await self.db.execute(statement)
            if result.rowcount != 1:
                await self.db.rollback()
                return False
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Erreur suppression enchère {bid_id}: {e}", exc_info=True)
            raise
        logger.info(f"Enchère ID {bid_id} supprimée.")
        return True
