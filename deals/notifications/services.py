import logging
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

from deals.bids.models import BidRead, BidStatus
from deals.config import settings
from deals.notifications.exceptions import EmailTemplateException
from deals.notifications.sender import AbstractEmailSender

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
BID_TEMPLATE = "bid_notification.html"


def format_money(value: Any) -> str:
    """12345.5 -> '$12,345.50'"""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"${amount:,.2f}"


def format_percent(value: Any) -> str:
    """Remise affichée avec une décimale : 21.9178 -> '21.9%'"""
    percent = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent:.1f}%"


env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=jinja2.select_autoescape(["html", "xml"]),
    undefined=jinja2.StrictUndefined,
)
env.filters["money"] = format_money
env.filters["percent"] = format_percent


# Variantes d'email par issue : (sujet, titre, message)
BID_OUTCOMES: Dict[str, Dict[str, str]] = {
    BidStatus.APPROVED.value: {
        "subject": "Your {portal} Bid Has Been Approved!",
        "heading": "Congratulations!",
        "message": (
            "Your bid has been successful. Your account representative will reach out "
            "shortly to finalize the details of your order."
        ),
    },
    BidStatus.REJECTED.value: {
        "subject": "Update on Your {portal} Bid",
        "heading": "Thank you for your bid",
        "message": (
            "We regret to inform you that your bid was not accepted this time. "
            "You are welcome to submit a new bid on this or any other available deal."
        ),
    },
    "cancelled": {
        "subject": "Your {portal} Bid Has Been Cancelled",
        "heading": "Bid cancelled",
        "message": (
            "Your bid has been cancelled as requested. "
            "You can place a new bid at any time while the deal remains open."
        ),
    },
}


class EmailService:
    """Service applicatif pour l'envoi des emails liés aux enchères."""

    def __init__(self, email_sender: AbstractEmailSender, portal_name: Optional[str] = None, portal_url: Optional[str] = None):
        self.email_sender = email_sender
        self.portal_name = portal_name or settings.PORTAL_NAME
        self.portal_url = portal_url or settings.PORTAL_URL

    def _render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Charge et rend un template Jinja2."""
        try:
            template = env.get_template(template_name)
            return template.render(context)
        except jinja2.TemplateNotFound as e:
            logger.error(f"[EmailService] Template email non trouvé: {template_name} dans {TEMPLATE_DIR}")
            raise EmailTemplateException(f"Template '{template_name}' non trouvé.") from e
        except jinja2.TemplateError as e:
            logger.error(f"[EmailService] Erreur rendu template {template_name}: {e}", exc_info=True)
            raise EmailTemplateException(f"Erreur lors du rendu du template {template_name}: {e}") from e

    def build_bid_email(self, bid: BidRead, outcome: str) -> Dict[str, str]:
        """Construit sujet et contenu HTML pour une issue ('approved', 'rejected', 'cancelled')."""
        variant = BID_OUTCOMES[outcome]
        context = {
            "portal_name": self.portal_name,
            "portal_url": self.portal_url,
            "heading": variant["heading"],
            "message": variant["message"],
            "outcome": outcome,
            "bid": bid,
        }
        return {
            "subject": variant["subject"].format(portal=self.portal_name),
            "html_content": self._render_template(BID_TEMPLATE, context),
        }

    async def _send_bid_email(self, bid: BidRead, outcome: str) -> bool:
        email = self.build_bid_email(bid, outcome)
        logger.info(f"[EmailService] Préparation email '{outcome}' enchère #{bid.id} pour {bid.user_email}")
        success = await self.email_sender.send_email(
            recipient_email=bid.user_email,
            subject=email["subject"],
            html_content=email["html_content"],
        )
        if success:
            logger.info(f"[EmailService] Email '{outcome}' enchère #{bid.id} envoyé à {bid.user_email}")
        else:
            logger.warning(f"[EmailService] L'envoi email '{outcome}' enchère #{bid.id} a échoué (retour sender: False)")
        return success

    async def send_bid_status_email(self, bid: BidRead, new_status: BidStatus) -> bool:
        """Notifie l'acheteur de la décision sur son enchère (approved / rejected)."""
        return await self._send_bid_email(bid, BidStatus(new_status).value)

    async def send_bid_cancelled_email(self, bid: BidRead) -> bool:
        """Confirme à l'acheteur l'annulation de son enchère."""
        return await self._send_bid_email(bid, "cancelled")
