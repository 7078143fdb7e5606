from typing import Annotated

from fastapi import Depends

from deals.bids.events import BidEventBus
from deals.notifications.dispatcher import BidNotificationDispatcher
from deals.notifications.sender import AbstractEmailSender
from deals.notifications.services import EmailService
from deals.notifications.smtp_sender import SmtpEmailSender

# --- Email Sender Dependency ---

def get_email_sender() -> AbstractEmailSender:
    """
    Fournit l'implémentation concrète de l'Email Sender.

    SmtpEmailSender lit la configuration depuis `deals.config` et ne la
    vérifie qu'au moment de l'envoi.
    """
    return SmtpEmailSender()

EmailSenderDep = Annotated[AbstractEmailSender, Depends(get_email_sender)]

# --- Email Service Dependency ---

def get_email_service(email_sender: EmailSenderDep) -> EmailService:
    return EmailService(email_sender=email_sender)

EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]

# --- Bus d'événements des enchères ---

def get_bid_event_bus(email_service: EmailServiceDep) -> BidEventBus:
    """Bus d'événements de la requête, avec le dispatcher de notifications abonné."""
    return BidNotificationDispatcher(email_service=email_service).register(BidEventBus())

BidEventBusDep = Annotated[BidEventBus, Depends(get_bid_event_bus)]
