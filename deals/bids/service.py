import logging
from datetime import date
from typing import Callable, Optional

from deals.auth.guard import (
    Actor,
    can_view,
    require_admin,
    require_authenticated,
    require_owner,
)
from deals.auth.exceptions import ForbiddenException
from deals.bids.events import BidCancelled, BidEventBus, BidStatusChanged
from deals.bids.exceptions import BidNotFoundException, InvalidBidTransitionException
from deals.bids.interfaces.repositories import AbstractBidRepository
from deals.bids.models import (
    DECISION_STATUSES,
    BidCreate,
    BidRead,
    BidStatus,
    BidTerms,
    PaginatedBidRead,
)
from deals.bids.validator import validate_bid
from deals.products.exceptions import LotNotFoundException
from deals.products.interfaces.repositories import AbstractProductLotRepository
from deals.products.models import ProductLotRead

logger = logging.getLogger(__name__)


class BidService:
    """Service applicatif du cycle de vie des enchères.

    Machine à états : pending -> approved | rejected, pending -> (supprimée).
    Les effets de bord (emails) ne sont exprimés que par des événements publiés
    sur le bus, toujours après l'écriture en base.
    """

    def __init__(
        self,
        bid_repo: AbstractBidRepository,
        lot_repo: AbstractProductLotRepository,
        event_bus: BidEventBus,
        enforce_close_bid_date: bool = True,
        enforce_case_quantity: bool = False,
        today: Callable[[], date] = date.today,
    ):
        self.bid_repo = bid_repo
        self.lot_repo = lot_repo
        self.event_bus = event_bus
        self.enforce_close_bid_date = enforce_close_bid_date
        self.enforce_case_quantity = enforce_case_quantity
        self.today = today

    async def _get_or_raise(self, bid_id: int) -> BidRead:
        bid = await self.bid_repo.get_by_id(bid_id=bid_id)
        if not bid:
            logger.warning(f"[BidService] Enchère ID {bid_id} non trouvée.")
            raise BidNotFoundException(bid_id)
        return bid

    # --- Création ---

    async def submit_bid(self, bid_in: BidCreate, actor: Optional[Actor]) -> BidRead:
        """Valide une offre contre le lot courant puis crée l'enchère en attente."""
        actor = require_authenticated(actor)
        logger.info(
            f"[BidService] Soumission enchère user {actor.user_id} sur lot {bid_in.product_id}: "
            f"{bid_in.quantity} x {bid_in.bid_price}"
        )

        lot = await self.lot_repo.get_by_id(lot_id=bid_in.product_id)
        if not lot:
            raise LotNotFoundException(bid_in.product_id)

        try:
            terms = validate_bid(
                lot,
                bid_in.quantity,
                bid_in.bid_price,
                today=self.today() if self.enforce_close_bid_date else None,
                enforce_case_quantity=self.enforce_case_quantity,
            )
        except Exception as e:
            logger.warning(f"[BidService] Enchère refusée pour user {actor.user_id} sur lot {lot.id}: {e}")
            raise

        return await self.create_bid(terms, actor, lot)

    async def create_bid(self, terms: BidTerms, owner: Optional[Actor], lot: ProductLotRead) -> BidRead:
        """Persiste une enchère déjà validée, en figeant l'instantané du lot."""
        owner = require_authenticated(owner)
        bid_data = {
            "user_id": owner.user_id,
            "user_email": owner.email,
            "product_id": lot.id,
            "product_name": lot.description,
            "regular_price": lot.regular_price,
            "image_url": lot.image_url,
            "quantity": terms.quantity,
            "bid_price": terms.unit_price,
            "discount_percent": terms.discount_percent,
            "total_value": terms.total_value,
            "status": BidStatus.PENDING.value,
        }
        created = await self.bid_repo.add(bid_data=bid_data)
        logger.info(f"[BidService] Enchère ID {created.id} créée (pending) pour user {owner.user_id}.")
        return created

    # --- Lecture ---

    async def get_bid(self, bid_id: int, actor: Optional[Actor]) -> BidRead:
        actor = require_authenticated(actor)
        bid = await self._get_or_raise(bid_id)
        if not can_view(actor, bid.user_id):
            logger.warning(f"[BidService] Accès refusé enchère {bid_id} pour user {actor.user_id}.")
            raise ForbiddenException(f"Accès non autorisé à l'enchère ID {bid_id}.")
        return bid

    async def list_my_bids(self, actor: Optional[Actor], limit: int, offset: int) -> PaginatedBidRead:
        actor = require_authenticated(actor)
        bids, total = await self.bid_repo.list_by_user_id(user_id=actor.user_id, limit=limit, offset=offset)
        return PaginatedBidRead(items=bids, total=total)

    async def list_all_bids(
        self, actor: Optional[Actor], limit: int, offset: int, status: Optional[BidStatus] = None
    ) -> PaginatedBidRead:
        require_admin(actor)
        bids, total = await self.bid_repo.list_all(limit=limit, offset=offset, status=status)
        return PaginatedBidRead(items=bids, total=total)

    # --- Transitions ---

    async def decide_bid(self, bid_id: int, new_status: BidStatus, actor: Optional[Actor]) -> BidRead:
        """Approuve ou rejette une enchère en attente (administrateurs uniquement)."""
        actor = require_admin(actor)
        logger.info(f"[BidService] Décision '{new_status}' sur enchère {bid_id} par admin {actor.user_id}")

        current = await self._get_or_raise(bid_id)
        try:
            new_status = BidStatus(new_status)
        except ValueError:
            logger.warning(f"[BidService] Statut cible inconnu '{new_status}' pour l'enchère {bid_id}.")
            raise InvalidBidTransitionException(bid_id, current.status.value, str(new_status))
        if new_status not in DECISION_STATUSES or current.status != BidStatus.PENDING:
            logger.warning(f"[BidService] Enchère {bid_id} déjà '{current.status.value}', décision refusée.")
            raise InvalidBidTransitionException(bid_id, current.status.value, new_status.value)

        updated = await self.bid_repo.update_status_if(
            bid_id=bid_id, expected_status=BidStatus.PENDING, new_status=new_status
        )
        if updated is None:
            # Une autre décision (ou une annulation) est passée entre la lecture et l'écriture
            latest = await self.bid_repo.get_by_id(bid_id=bid_id)
            if latest is None:
                raise BidNotFoundException(bid_id)
            raise InvalidBidTransitionException(bid_id, latest.status.value, new_status.value)

        await self.event_bus.publish(
            BidStatusChanged(bid=updated, previous_status=current.status, new_status=updated.status)
        )
        return updated

    async def cancel_bid(self, bid_id: int, actor: Optional[Actor]) -> BidRead:
        """Annulation par le propriétaire, uniquement tant que l'enchère est en attente."""
        actor = require_authenticated(actor)
        bid = await self._get_or_raise(bid_id)
        require_owner(actor, bid.user_id)

        if bid.status != BidStatus.PENDING:
            logger.warning(f"[BidService] Annulation refusée: enchère {bid_id} déjà '{bid.status.value}'.")
            raise InvalidBidTransitionException(bid_id, bid.status.value, "cancelled")

        deleted = await self.bid_repo.delete_if(bid_id=bid_id, expected_status=BidStatus.PENDING)
        if not deleted:
            latest = await self.bid_repo.get_by_id(bid_id=bid_id)
            if latest is None:
                raise BidNotFoundException(bid_id)
            raise InvalidBidTransitionException(bid_id, latest.status.value, "cancelled")

        logger.info(f"[BidService] Enchère {bid_id} annulée par son propriétaire {actor.user_id}.")
        await self.event_bus.publish(BidCancelled(bid=bid, cancelled_by_user_id=actor.user_id))
        return bid

    async def delete_bid(self, bid_id: int, actor: Optional[Actor]) -> BidRead:
        """Suppression administrative, quel que soit le statut."""
        actor = require_admin(actor)
        bid = await self._get_or_raise(bid_id)

        deleted = await self.bid_repo.delete_if(bid_id=bid_id)
        if not deleted:
            raise BidNotFoundException(bid_id)

        logger.info(f"[BidService] Enchère {bid_id} ('{bid.status.value}') supprimée par admin {actor.user_id}.")
        await self.event_bus.publish(BidCancelled(bid=bid, cancelled_by_user_id=actor.user_id))
        return bid

    async def withdraw_bid(self, bid_id: int, actor: Optional[Actor]) -> BidRead:
        """Point d'entrée unique de DELETE : le propriétaire annule, un administrateur supprime."""
        actor = require_authenticated(actor)
        if actor.is_admin:
            bid = await self._get_or_raise(bid_id)
            # Sa propre enchère en attente suit le chemin d'annulation, tout le reste est une suppression admin
            if bid.user_id != actor.user_id or bid.status != BidStatus.PENDING:
                return await self.delete_bid(bid_id, actor)
        return await self.cancel_bid(bid_id, actor)
