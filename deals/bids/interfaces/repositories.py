from abc import ABC, abstractmethod
from typing import Optional, List, Tuple, Dict, Any

from deals.bids.models import BidRead, BidStatus


class AbstractBidRepository(ABC):
    """Interface abstraite pour le repository des enchères.

    Les écritures de statut et les suppressions sont conditionnelles (compare-and-swap)
    afin que deux décisions concurrentes sur la même enchère ne puissent pas réussir toutes les deux.
    """

    @abstractmethod
    async def get_by_id(self, *, bid_id: int) -> Optional[BidRead]:
        pass

    @abstractmethod
    async def list_by_user_id(self, *, user_id: int, offset: int = 0, limit: int = 100) -> Tuple[List[BidRead], int]:
        """Liste les enchères d'un acheteur, les plus récentes d'abord."""
        pass

    @abstractmethod
    async def list_all(
        self, *, offset: int = 0, limit: int = 100, status: Optional[BidStatus] = None
    ) -> Tuple[List[BidRead], int]:
        """Liste toutes les enchères (vue admin), filtrables par statut."""
        pass

    @abstractmethod
    async def add(self, *, bid_data: Dict[str, Any]) -> BidRead:
        pass

    @abstractmethod
    async def update_status_if(
        self, *, bid_id: int, expected_status: BidStatus, new_status: BidStatus
    ) -> Optional[BidRead]:
        """Écrit new_status seulement si le statut stocké vaut encore expected_status.

        Retourne l'enchère mise à jour, ou None si la précondition n'est plus vraie.
        """
        pass

    @abstractmethod
    async def delete_if(self, *, bid_id: int, expected_status: Optional[BidStatus] = None) -> bool:
        """Supprime l'enchère (si expected_status est fourni, seulement si le statut correspond)."""
        pass
