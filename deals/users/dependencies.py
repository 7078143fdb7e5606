"""
Module définissant les dépendances FastAPI pour le module utilisateur.
"""
import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from deals.database import get_db_session
from deals.users.interfaces.repositories import AbstractUserRepository
from deals.users.repositories import SQLAlchemyUserRepository
from deals.users.service import UserService

logger = logging.getLogger(__name__)

DbSessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_user_repository(session: DbSessionDep) -> AbstractUserRepository:
    """Fournit le repository utilisateur (implémentation SQLAlchemy)."""
    logger.debug("Fourniture de SQLAlchemyUserRepository")
    return SQLAlchemyUserRepository(db_session=session)

UserRepositoryDep = Annotated[AbstractUserRepository, Depends(get_user_repository)]

def get_user_service(user_repository: UserRepositoryDep) -> UserService:
    logger.debug("Fourniture de UserService")
    return UserService(user_repository=user_repository)

UserServiceDep = Annotated[UserService, Depends(get_user_service)]
