from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

from deals.users.models import User, UserProfileUpdate


class AbstractUserRepository(ABC):
    """Interface abstraite pour le repository des utilisateurs."""

    @abstractmethod
    async def get_by_id(self, *, user_id: int) -> Optional[User]:
        """Récupère un utilisateur par son ID."""
        pass

    @abstractmethod
    async def get_by_email(self, *, email: str) -> Optional[User]:
        """Récupère un utilisateur par son email."""
        pass

    @abstractmethod
    async def email_exists(self, *, email: str) -> bool:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def create(self, *, user_data: Dict[str, Any]) -> User:
        """Crée un utilisateur à partir d'un dict déjà préparé (mot de passe haché)."""
        pass

    @abstractmethod
    async def update_profile(self, *, user_id: int, profile: UserProfileUpdate) -> Optional[User]:
        """Met à jour les champs de profil fournis."""
        pass
