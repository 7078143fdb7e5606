"""
Dispatcher des notifications d'enchères.

Consomme les événements du cycle de vie et envoie au plus un email par événement
à bid.user_email. Les échecs de livraison sont journalisés et jamais propagés :
la transition qui a déclenché l'événement reste acquise.
"""
import logging

from deals.bids.events import BidCancelled, BidEventBus, BidStatusChanged
from deals.bids.models import DECISION_STATUSES, BidRead, BidStatus
from deals.notifications.services import EmailService

logger = logging.getLogger(__name__)


class BidNotificationDispatcher:

    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    async def on_status_changed(self, bid: BidRead, previous_status: BidStatus, new_status: BidStatus) -> None:
        if previous_status == new_status:
            logger.debug(f"[Dispatcher] Enchère #{bid.id}: statut inchangé ('{new_status}'), aucun email.")
            return
        if new_status not in DECISION_STATUSES:
            logger.debug(f"[Dispatcher] Enchère #{bid.id}: pas de variante email pour '{new_status}'.")
            return
        try:
            await self.email_service.send_bid_status_email(bid, new_status)
        except Exception as e:
            logger.error(f"[Dispatcher] Échec notification '{new_status}' enchère #{bid.id} à {bid.user_email}: {e}", exc_info=True)

    async def on_cancelled(self, bid: BidRead) -> None:
        try:
            await self.email_service.send_bid_cancelled_email(bid)
        except Exception as e:
            logger.error(f"[Dispatcher] Échec notification d'annulation enchère #{bid.id} à {bid.user_email}: {e}", exc_info=True)

    async def handle_status_changed(self, event: BidStatusChanged) -> None:
        await self.on_status_changed(event.bid, event.previous_status, event.new_status)

    async def handle_cancelled(self, event: BidCancelled) -> None:
        await self.on_cancelled(event.bid)

    def register(self, bus: BidEventBus) -> BidEventBus:
        """Abonne le dispatcher aux événements du bus."""
        bus.subscribe(BidStatusChanged, self.handle_status_changed)
        bus.subscribe(BidCancelled, self.handle_cancelled)
        return bus
