"""
Contrôle d'accès : « l'identité X peut-elle effectuer l'opération Y sur la ressource Z ? ».

L'identité agissante (Actor) est toujours passée explicitement aux services ;
aucune session admin globale n'est conservée.
"""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from deals.auth.exceptions import ForbiddenException, UnauthenticatedException

logger = logging.getLogger(__name__)


class Actor(BaseModel):
    """Identité et capacités de l'utilisateur qui agit."""
    user_id: int
    email: EmailStr
    is_admin: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_user(cls, user) -> "Actor":
        """Construit l'acteur depuis un enregistrement utilisateur (profil)."""
        return cls(user_id=user.id, email=user.email, is_admin=bool(user.is_admin))


def require_authenticated(actor: Optional[Actor]) -> Actor:
    if actor is None:
        logger.warning("[Guard] Opération refusée: aucune identité.")
        raise UnauthenticatedException()
    return actor


def require_admin(actor: Optional[Actor]) -> Actor:
    """Exige la capacité administrateur (décisions d'enchères, gestion du catalogue)."""
    actor = require_authenticated(actor)
    if not actor.is_admin:
        logger.warning(f"[Guard] Opération admin refusée pour user {actor.user_id}.")
        raise ForbiddenException("Opération réservée aux administrateurs.")
    return actor


def require_owner(actor: Optional[Actor], owner_id: int) -> Actor:
    """Exige que l'acteur soit le propriétaire de la ressource."""
    actor = require_authenticated(actor)
    if actor.user_id != owner_id:
        logger.warning(f"[Guard] User {actor.user_id} n'est pas propriétaire (owner: {owner_id}).")
        raise ForbiddenException("Accès réservé au propriétaire de la ressource.")
    return actor


def require_owner_or_admin(actor: Optional[Actor], owner_id: int) -> Actor:
    actor = require_authenticated(actor)
    if not actor.is_admin and actor.user_id != owner_id:
        logger.warning(f"[Guard] Accès refusé pour user {actor.user_id} (owner: {owner_id}).")
        raise ForbiddenException("Accès non autorisé à cette ressource.")
    return actor


def can_view(actor: Optional[Actor], owner_id: int) -> bool:
    return actor is not None and (actor.is_admin or actor.user_id == owner_id)
