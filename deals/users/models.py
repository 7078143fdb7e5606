"""
Module définissant les modèles SQLModel pour l'entité User.

Ce module contient :
- UserBase : Classe SQLModel de base avec les champs communs.
- User : Modèle de table SQLModel (table=True) héritant de UserBase.
- UserCreate, UserRead, UserProfileUpdate : Schémas pour l'API.
"""
from typing import Optional
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field
from pydantic import EmailStr

# =====================================================
# Schémas: Utilisateurs (SQLModel approach)
# =====================================================

class UserBase(SQLModel):
    """Modèle SQLModel de base pour un utilisateur (données communes, Pydantic)."""
    email: EmailStr = Field(unique=True, index=True, max_length=255, nullable=False)
    name: Optional[str] = Field(default=None, max_length=100)
    company: Optional[str] = Field(default=None, max_length=150)
    phone: Optional[str] = Field(default=None, max_length=50)
    is_admin: bool = Field(default=False, nullable=False)

# ----- Modèle de Table -----
class User(UserBase, table=True):
    """Modèle de table SQLModel pour les utilisateurs."""
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, index=True)
    password_hash: str = Field(nullable=False, max_length=255)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at: Optional[datetime] = Field(default=None)

# ----- Schémas API -----
class UserCreate(SQLModel):
    """Schéma pour l'inscription d'un utilisateur (jamais admin via ce schéma)."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = Field(default=None, max_length=100)
    company: Optional[str] = Field(default=None, max_length=150)
    phone: Optional[str] = Field(default=None, max_length=50)

class UserRead(UserBase):
    """Schéma pour lire les données d'un utilisateur."""
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

class UserProfileUpdate(SQLModel):
    """Mise à jour partielle du profil. Email, mot de passe et is_admin ne sont pas modifiables ici."""
    name: Optional[str] = Field(default=None, max_length=100)
    company: Optional[str] = Field(default=None, max_length=150)
    phone: Optional[str] = Field(default=None, max_length=50)
