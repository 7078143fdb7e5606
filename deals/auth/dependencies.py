"""
Module définissant les dépendances FastAPI pour l'authentification.

Fournit des dépendances pour:
- Le service d'authentification (AuthService)
- L'obtention de l'utilisateur courant à partir du token JWT
- L'identité explicite (Actor) transmise aux services métier
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from deals.auth.config import OAUTH2_TOKEN_URL
from deals.auth.exceptions import TokenMissingException, TokenInvalidException
from deals.auth.guard import Actor
from deals.auth.service import AuthService
from deals.users.dependencies import UserRepositoryDep
from deals.users.models import UserRead

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=OAUTH2_TOKEN_URL, auto_error=False)

def get_auth_service(user_repository: UserRepositoryDep) -> AuthService:
    """Fournit une instance du service d'authentification."""
    logger.debug("Fourniture de AuthService avec UserRepository injecté")
    return AuthService(user_repository=user_repository)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]

async def get_current_user(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: AuthServiceDep,
) -> UserRead:
    """
    Vérifie le token JWT et retourne l'utilisateur courant.

    Raises:
        TokenMissingException: Si le token est manquant
        TokenInvalidException: Si le token est invalide
    """
    if token is None:
        logger.warning("Token manquant dans la requête.")
        raise TokenMissingException()

    user = await auth_service.get_user_from_token(token)
    if user is None:
        logger.warning("Token invalide ou utilisateur non trouvé.")
        raise TokenInvalidException()

    logger.debug(f"Utilisateur authentifié: ID {user.id}")
    return user

CurrentUserDep = Annotated[UserRead, Depends(get_current_user)]

async def get_current_actor(current_user: CurrentUserDep) -> Actor:
    """Identité explicite transmise aux services (capacité admin issue du profil)."""
    return Actor.from_user(current_user)

CurrentActorDep = Annotated[Actor, Depends(get_current_actor)]
