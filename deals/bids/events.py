"""
Événements émis par le cycle de vie des enchères et bus de diffusion en mémoire.

Le cycle de vie ne fait qu'émettre ; les abonnés (ex: notifications email)
consomment. Un abonné qui échoue n'affecte ni les autres abonnés ni la
transition qui a déclenché l'événement.
"""
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Type, Union

from pydantic import BaseModel, Field

from deals.bids.models import BidRead, BidStatus

logger = logging.getLogger(__name__)


class BidStatusChanged(BaseModel):
    """Changement de statut d'une enchère, avec l'état avant/après."""
    bid: BidRead
    previous_status: BidStatus
    new_status: BidStatus
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BidCancelled(BaseModel):
    """Suppression d'une enchère ; porte l'instantané complet d'avant suppression."""
    bid: BidRead
    cancelled_by_user_id: int
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


BidEvent = Union[BidStatusChanged, BidCancelled]
BidEventHandler = Callable[[BidEvent], Awaitable[None]]


class BidEventBus:
    """Bus d'événements en processus, abonnements par type d'événement."""

    def __init__(self):
        self._handlers: Dict[Type[BaseModel], List[BidEventHandler]] = {}

    def subscribe(self, event_type: Type[BaseModel], handler: BidEventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"[BidEventBus] Abonné {getattr(handler, '__qualname__', handler)} à {event_type.__name__}")

    async def publish(self, event: BidEvent) -> None:
        """Diffuse l'événement à chaque abonné ; les erreurs des abonnés sont journalisées."""
        handlers = self._handlers.get(type(event), [])
        logger.debug(f"[BidEventBus] Publication {type(event).__name__} (bid {event.bid.id}) vers {len(handlers)} abonné(s)")
        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"[BidEventBus] Abonné {getattr(handler, '__qualname__', handler)} en échec pour "
                    f"{type(event).__name__} (bid {event.bid.id}): {e}",
                    exc_info=True,
                )
