from abc import ABC, abstractmethod
from typing import Optional, List, Tuple

from deals.products.models import ProductLotRead, ProductLotCreate


class AbstractProductLotRepository(ABC):
    """Interface abstraite pour le repository du catalogue de lots."""

    @abstractmethod
    async def get_by_id(self, *, lot_id: int) -> Optional[ProductLotRead]:
        """Récupère un lot validé par son ID."""
        pass

    @abstractmethod
    async def list_all(self, *, offset: int = 0, limit: int = 100) -> Tuple[List[ProductLotRead], int]:
        """Liste les lots triés par catégorie."""
        pass

    @abstractmethod
    async def replace_all(self, *, lots: List[ProductLotCreate]) -> Tuple[int, int]:
        """Supprime tous les lots puis insère les nouveaux. Retourne (supprimés, insérés)."""
        pass

    @abstractmethod
    async def set_image_url(self, *, lot_id: int, image_url: str) -> Optional[ProductLotRead]:
        pass
