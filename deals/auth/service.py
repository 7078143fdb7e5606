"""
Connexion par email / mot de passe et résolution du porteur d'un jeton.
"""
import logging
from typing import Optional

from deals.auth.security import create_access_token, decode_access_token, verify_password
from deals.users.interfaces.repositories import AbstractUserRepository
from deals.users.models import UserRead

logger = logging.getLogger(__name__)

class AuthService:

    def __init__(self, user_repository: AbstractUserRepository):
        self.user_repository = user_repository

    async def login(self, email: str, password: str) -> Optional[str]:
        """Retourne un jeton d'accès si les identifiants sont corrects, sinon None.

        Email inconnu et mot de passe faux ne sont pas distingués pour l'appelant.
        """
        user = await self.user_repository.get_by_email(email=email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"[AuthService] Connexion refusée pour {email}")
            return None

        logger.info(f"[AuthService] Connexion de l'utilisateur ID {user.id} (admin: {user.is_admin})")
        return create_access_token(user.id)

    async def get_user_from_token(self, token: str) -> Optional[UserRead]:
        """Profil du porteur du jeton ; None si le jeton est invalide ou le compte supprimé."""
        user_id = decode_access_token(token)
        if user_id is None:
            return None

        user = await self.user_repository.get_by_id(user_id=user_id)
        if user is None:
            logger.warning(f"[AuthService] Jeton valide pour un compte disparu (ID {user_id})")
            return None
        return UserRead.model_validate(user)
