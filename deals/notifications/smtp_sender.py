import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from deals.config import settings
from deals.notifications.exceptions import EmailConfigurationException, EmailSendingException
from deals.notifications.sender import AbstractEmailSender

logger = logging.getLogger(__name__)

class SmtpEmailSender(AbstractEmailSender):
    """Implémentation de l'envoi d'email via SMTP standard.

    La configuration n'est vérifiée qu'à l'envoi : une configuration incomplète
    n'empêche pas l'application de servir les requêtes.
    """

    def __init__(self,
                 smtp_host: Optional[str] = None,
                 smtp_port: Optional[int] = None,
                 smtp_user: Optional[str] = None,
                 smtp_password: Optional[str] = None,
                 default_sender: Optional[str] = None,
                 sender_name: Optional[str] = None,
                 use_tls: Optional[bool] = None,
                 timeout: Optional[float] = None):
        self.smtp_host = smtp_host or settings.SMTP_HOST
        self.smtp_port = smtp_port or settings.SMTP_PORT
        self.smtp_user = smtp_user or settings.SENDER_EMAIL
        self.smtp_password = smtp_password if smtp_password is not None else settings.SENDER_PASSWORD
        self.default_sender = default_sender or settings.SENDER_EMAIL
        self.sender_name = sender_name or settings.SENDER_NAME
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.timeout = timeout or settings.SMTP_TIMEOUT_SECONDS
        logger.debug(f"[SmtpEmailSender] Initialisé pour {self.smtp_host}:{self.smtp_port}")

    def _check_configuration(self) -> None:
        if not all([self.smtp_host, self.smtp_port, self.smtp_user, self.smtp_password, self.default_sender]):
            logger.error("[SmtpEmailSender] Configuration SMTP incomplète.")
            raise EmailConfigurationException("Configuration SMTP (host, port, user, password, sender) incomplète.")

    def build_message(self, recipient_email: str, subject: str, html_content: str, sender_email: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((self.sender_name, sender_email))
        msg["To"] = recipient_email
        msg["Subject"] = subject
        msg.attach(MIMEText(html_content, "html", "utf-8"))
        return msg

    def _send_sync(self, msg: MIMEMultipart, sender_email: str, recipient_email: str) -> None:
        logger.debug(f"[SmtpEmailSender] Connexion à {self.smtp_host}:{self.smtp_port}")
        # Port 465 : TLS implicite, sinon STARTTLS optionnel
        if self.smtp_port == 465:
            server_factory = smtplib.SMTP_SSL
        else:
            server_factory = smtplib.SMTP
        with server_factory(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
            if self.use_tls and server_factory is smtplib.SMTP:
                server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.sendmail(sender_email, [recipient_email], msg.as_string())

    async def send_email(
        self,
        recipient_email: str,
        subject: str,
        html_content: str,
        sender_email: Optional[str] = None,
    ) -> bool:
        self._check_configuration()
        final_sender = sender_email or self.default_sender
        msg = self.build_message(recipient_email, subject, html_content, final_sender)

        try:
            logger.info(f"[SmtpEmailSender] Envoi de l'email à {recipient_email} (Sujet: {subject})")
            # smtplib est bloquant : exécution hors de la boucle d'événements
            await asyncio.to_thread(self._send_sync, msg, final_sender, recipient_email)
            logger.info(f"[SmtpEmailSender] Email envoyé avec succès à {recipient_email}")
            return True
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"[SmtpEmailSender] Échec authentification SMTP: {e}", exc_info=True)
            raise EmailSendingException("Échec authentification SMTP.", original_exception=e)
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"[SmtpEmailSender] Destinataire refusé: {recipient_email}. Détails: {e.recipients}")
            return False
        except smtplib.SMTPSenderRefused as e:
            logger.error(f"[SmtpEmailSender] Expéditeur refusé: {final_sender}. Détails: {e.sender}", exc_info=True)
            raise EmailSendingException(f"Expéditeur refusé par le serveur: {final_sender}", original_exception=e)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[SmtpEmailSender] Erreur SMTP lors de l'envoi à {recipient_email}: {e}", exc_info=True)
            raise EmailSendingException(f"Erreur SMTP: {e}", original_exception=e)
