import logging
from typing import Optional

from deals.auth.guard import Actor, require_admin
from deals.products.exceptions import LotNotFoundException
from deals.products.interfaces.repositories import AbstractProductLotRepository
from deals.products.models import (
    CatalogImport,
    CatalogImportResult,
    PaginatedProductLotRead,
    ProductLotRead,
)

logger = logging.getLogger(__name__)

class CatalogService:
    """Service applicatif du catalogue de lots."""

    def __init__(self, lot_repo: AbstractProductLotRepository):
        self.lot_repo = lot_repo

    async def get_lot(self, lot_id: int) -> ProductLotRead:
        lot = await self.lot_repo.get_by_id(lot_id=lot_id)
        if not lot:
            logger.warning(f"[CatalogService] Lot ID {lot_id} non trouvé.")
            raise LotNotFoundException(lot_id)
        return lot

    async def list_lots(self, limit: int, offset: int) -> PaginatedProductLotRead:
        logger.debug(f"[CatalogService] Listage lots limit: {limit}, offset: {offset}")
        lots, total = await self.lot_repo.list_all(offset=offset, limit=limit)
        return PaginatedProductLotRead(items=lots, total=total)

    async def import_catalog(self, catalog: CatalogImport, actor: Optional[Actor]) -> CatalogImportResult:
        """Remplace l'intégralité du catalogue (réservé aux administrateurs).

        Les enchères existantes conservent leur instantané du lot et ne sont pas touchées.
        """
        actor = require_admin(actor)
        logger.info(f"[CatalogService] Import de {len(catalog.lots)} lot(s) par admin {actor.user_id}")
        deleted, inserted = await self.lot_repo.replace_all(lots=catalog.lots)
        return CatalogImportResult(deleted=deleted, inserted=inserted)

    async def attach_image(self, lot_id: int, image_url: str, actor: Optional[Actor]) -> ProductLotRead:
        """Associe l'URL d'une image (déjà téléversée) à un lot."""
        actor = require_admin(actor)
        updated = await self.lot_repo.set_image_url(lot_id=lot_id, image_url=image_url)
        if not updated:
            raise LotNotFoundException(lot_id)
        logger.info(f"[CatalogService] Image associée au lot ID {lot_id} par admin {actor.user_id}")
        return updated
