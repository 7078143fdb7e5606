import logging
from typing import Optional, Dict, Any
from datetime import datetime, timezone

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from deals.users.models import User, UserProfileUpdate
from deals.users.interfaces.repositories import AbstractUserRepository
from deals.users.exceptions import DuplicateEmailException

logger = logging.getLogger(__name__)


class SQLAlchemyUserRepository(AbstractUserRepository):
    """Implémentation SQLAlchemy du repository des utilisateurs."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(User)

    async def get_by_id(self, *, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_email(self, *, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().one_or_none()

    async def email_exists(self, *, email: str) -> bool:
        return await self.crud.exists(db=self.db, email=email)

    async def count(self) -> int:
        return await self.crud.count(db=self.db)

    async def create(self, *, user_data: Dict[str, Any]) -> User:
        db_user = User(**user_data)
        self.db.add(db_user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Violation d'unicité à la création de l'utilisateur {user_data.get('email')}: {e.orig}")
            raise DuplicateEmailException(user_data.get("email"))
        await self.db.refresh(db_user)
        logger.info(f"Utilisateur ID {db_user.id} créé (admin: {db_user.is_admin}).")
        return db_user

    async def update_profile(self, *, user_id: int, profile: UserProfileUpdate) -> Optional[User]:
        db_user = await self.db.get(User, user_id)
        if not db_user:
            return None

        changes = profile.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(db_user, field, value)
        db_user.updated_at = datetime.now(timezone.utc)

        await self.db.commit()
        await self.db.refresh(db_user)
        return db_user
