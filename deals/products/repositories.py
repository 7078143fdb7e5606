import logging
from typing import Optional, List, Tuple, Any, Dict

from fastcrud import FastCRUD
from pydantic import ValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from deals.products.models import ProductLot, ProductLotCreate, ProductLotRead
from deals.products.interfaces.repositories import AbstractProductLotRepository
from deals.products.exceptions import CatalogImportException, MalformedLotException

logger = logging.getLogger(__name__)


def _to_read(record: Any) -> ProductLotRead:
    """Valide un enregistrement brut (ORM ou dict) en instantané de lot."""
    try:
        return ProductLotRead.model_validate(record)
    except ValidationError as e:
        lot_id = record.get("id") if isinstance(record, dict) else getattr(record, "id", None)
        logger.error(f"Lot ID {lot_id} rejeté à la lecture: {e}")
        raise MalformedLotException(lot_id=lot_id, detail=str(e))


class SQLAlchemyProductLotRepository(AbstractProductLotRepository):
    """Implémentation SQLAlchemy du repository du catalogue."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(ProductLot)

    async def get_by_id(self, *, lot_id: int) -> Optional[ProductLotRead]:
        lot_db = await self.db.get(ProductLot, lot_id)
        if not lot_db:
            logger.debug(f"Lot ID {lot_id} non trouvé dans get_by_id().")
            return None
        return _to_read(lot_db)

    async def list_all(self, *, offset: int = 0, limit: int = 100) -> Tuple[List[ProductLotRead], int]:
        result: Dict[str, Any] = await self.crud.get_multi(
            db=self.db,
            offset=offset,
            limit=limit,
            sort_columns=["category", "id"],
            sort_orders=["asc", "asc"],
        )
        lots = [_to_read(row) for row in result.get("data", [])]
        return lots, result.get("total_count", len(lots))

    async def replace_all(self, *, lots: List[ProductLotCreate]) -> Tuple[int, int]:
        try:
            deleted = await self.db.execute(delete(ProductLot))
            self.db.add_all([ProductLot(**lot.model_dump()) for lot in lots])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Erreur base de données pendant l'import du catalogue: {e}", exc_info=True)
            raise CatalogImportException(detail=f"Erreur base de données: {e}")

        deleted_count = deleted.rowcount or 0
        logger.info(f"Catalogue remplacé: {deleted_count} lot(s) supprimé(s), {len(lots)} inséré(s).")
        return deleted_count, len(lots)

    async def set_image_url(self, *, lot_id: int, image_url: str) -> Optional[ProductLotRead]:
        lot_db = await self.db.get(ProductLot, lot_id)
        if not lot_db:
            logger.warning(f"Tentative d'ajout d'image sur lot ID {lot_id} non trouvé.")
            return None

        lot_db.image_url = image_url
        await self.db.commit()
        await self.db.refresh(lot_db)
        return _to_read(lot_db)
