import logging

from fastapi import APIRouter, HTTPException, status

from deals.auth.dependencies import CurrentUserDep
from deals.users.dependencies import UserServiceDep
from deals.users.exceptions import (
    DuplicateEmailException,
    InitialSetupClosedException,
    UserNotFoundException,
)
from deals.users.models import UserCreate, UserRead, UserProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: UserCreate, user_service: UserServiceDep):
    """Inscription d'un acheteur (compte non administrateur)."""
    logger.info(f"API register_user: {user_in.email}")
    try:
        return await user_service.register(user_in)
    except DuplicateEmailException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

@router.post("/setup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def initial_setup(user_in: UserCreate, user_service: UserServiceDep):
    """Crée le premier administrateur. Disponible uniquement sur une base vide."""
    logger.info(f"API initial_setup: {user_in.email}")
    try:
        return await user_service.initial_setup(user_in)
    except InitialSetupClosedException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    except DuplicateEmailException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

@router.get("/me", response_model=UserRead)
async def read_my_profile(current_user: CurrentUserDep):
    return current_user

@router.patch("/me", response_model=UserRead)
async def update_my_profile(
    profile: UserProfileUpdate,
    current_user: CurrentUserDep,
    user_service: UserServiceDep,
):
    """Met à jour le profil (nom, société, téléphone) de l'utilisateur connecté."""
    logger.info(f"API update_my_profile pour user ID: {current_user.id}")
    try:
        return await user_service.update_profile(current_user.id, profile)
    except UserNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

user_router = router
