import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from deals.auth.dependencies import AuthServiceDep, CurrentUserDep
from deals.auth.exceptions import InvalidCredentialsException
from deals.users.models import UserRead

logger = logging.getLogger(__name__)

router = APIRouter()

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    auth_service: AuthServiceDep,
):
    """Échange email (champ `username`) et mot de passe contre un jeton bearer."""
    access_token = await auth_service.login(email=form_data.username, password=form_data.password)
    if access_token is None:
        raise InvalidCredentialsException()
    return Token(access_token=access_token)

@router.get("/me", response_model=UserRead)
async def read_users_me(current_user: CurrentUserDep):
    return current_user

auth_router = router
