"""
Module contenant la logique métier (services) pour les utilisateurs :
inscription, configuration initiale du premier administrateur et profil.
"""
import logging

from deals.auth.security import get_password_hash
from deals.users.exceptions import (
    DuplicateEmailException,
    InitialSetupClosedException,
    UserNotFoundException,
)
from deals.users.interfaces.repositories import AbstractUserRepository
from deals.users.models import UserCreate, UserRead, UserProfileUpdate

logger = logging.getLogger(__name__)

class UserService:
    """Service pour gérer les opérations sur les utilisateurs."""

    def __init__(self, user_repository: AbstractUserRepository):
        self.user_repository = user_repository

    async def create_user(self, user_data: UserCreate, is_admin: bool = False) -> UserRead:
        """Crée un nouvel utilisateur et retourne le schéma UserRead."""
        logger.debug(f"[UserService] Tentative de création utilisateur: {user_data.email}")

        if await self.user_repository.email_exists(email=user_data.email):
            logger.warning(f"[UserService] Email déjà existant: {user_data.email}")
            raise DuplicateEmailException(user_data.email)

        user_dict_to_create = {
            "email": user_data.email,
            "name": user_data.name,
            "company": user_data.company,
            "phone": user_data.phone,
            "password_hash": get_password_hash(user_data.password),
            "is_admin": is_admin,
        }
        created_user = await self.user_repository.create(user_data=user_dict_to_create)
        logger.info(f"[UserService] Utilisateur créé avec ID: {created_user.id}")
        return UserRead.model_validate(created_user)

    async def register(self, user_data: UserCreate) -> UserRead:
        """Inscription publique : le compte créé n'est jamais administrateur."""
        return await self.create_user(user_data, is_admin=False)

    async def initial_setup(self, user_data: UserCreate) -> UserRead:
        """Crée le premier compte administrateur. Refusé dès qu'un compte existe."""
        existing = await self.user_repository.count()
        if existing > 0:
            logger.warning(f"[UserService] Configuration initiale refusée: {existing} compte(s) existant(s).")
            raise InitialSetupClosedException()
        logger.info(f"[UserService] Configuration initiale: création de l'administrateur {user_data.email}")
        return await self.create_user(user_data, is_admin=True)

    async def update_profile(self, user_id: int, profile: UserProfileUpdate) -> UserRead:
        """Met à jour nom, société et téléphone de l'utilisateur."""
        updated = await self.user_repository.update_profile(user_id=user_id, profile=profile)
        if not updated:
            raise UserNotFoundException(user_id)
        logger.info(f"[UserService] Profil mis à jour pour user ID {user_id}")
        return UserRead.model_validate(updated)
