from abc import ABC, abstractmethod
from typing import Optional

class AbstractEmailSender(ABC):
    """Interface abstraite pour un service d'envoi d'e-mails."""

    @abstractmethod
    async def send_email(
        self,
        recipient_email: str,
        subject: str,
        html_content: str,
        sender_email: Optional[str] = None,
    ) -> bool:
        """Envoie un email.

        Args:
            recipient_email: Adresse email du destinataire.
            subject: Sujet de l'email.
            html_content: Contenu HTML de l'email.
            sender_email: Adresse de l'expéditeur (sinon celle de la configuration).

        Returns:
            True si l'envoi a réussi, False si le destinataire a été refusé.

        Raises:
            EmailConfigurationException: Si la configuration SMTP est incomplète.
            EmailSendingException: Si une erreur empêche l'envoi.
        """
        raise NotImplementedError
