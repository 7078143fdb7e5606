"""
Modèles du catalogue : lots de produits proposés aux enchères.

Un lot porte le prix régulier, la quantité disponible, la remise maximale
autorisée et la date de clôture des enchères.
"""
from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime, timezone

from sqlalchemy import Numeric
from sqlmodel import SQLModel, Field
from pydantic import ConfigDict

# --- Modèle ProductLot SQLModel ---

class ProductLotBase(SQLModel):
    category: str = Field(index=True, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    upc: Optional[str] = Field(default=None, max_length=50) # Code identifiant du produit
    description: str = Field(max_length=500)
    lot_number: Optional[str] = Field(default=None, max_length=50)
    expiry_date: Optional[date] = Field(default=None)
    case_quantity: int = Field(default=1)
    quantity_available: int = Field(default=0)
    close_bid_date: date

class ProductLot(ProductLotBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    regular_price: Decimal = Field(sa_type=Numeric(12, 2))
    max_discount_percent: Decimal = Field(sa_type=Numeric(5, 2))
    image_url: Optional[str] = Field(default=None, max_length=1024)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)

    __tablename__ = "products"
    # Un import ne doit jamais réattribuer l'ID d'un lot supprimé (les enchères gardent product_id)
    __table_args__ = {"sqlite_autoincrement": True}

# Schémas API pour ProductLot

class ProductLotCreate(ProductLotBase):
    """Ligne de catalogue importée. Les contraintes rejettent les lignes malformées avant stockage."""
    regular_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    case_quantity: int = Field(default=1, gt=0)
    quantity_available: int = Field(..., ge=0)
    max_discount_percent: Decimal = Field(..., ge=0, le=100, max_digits=5, decimal_places=2)
    image_url: Optional[str] = None

class ProductLotRead(ProductLotBase):
    """Instantané validé d'un lot tel que lu depuis le stockage.

    regular_price accepte 0 : un prix nul est un lot dégénéré que le validateur
    d'enchères rejette explicitement (InvalidLotPricing).
    """
    id: int
    regular_price: Decimal = Field(..., ge=0)
    case_quantity: int = Field(..., gt=0)
    quantity_available: int = Field(..., ge=0)
    max_discount_percent: Decimal = Field(..., ge=0, le=100)
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ProductLotImageUpdate(SQLModel):
    image_url: str = Field(..., min_length=1, max_length=1024)

class CatalogImport(SQLModel):
    """Remplacement complet du catalogue par les lignes fournies."""
    lots: List[ProductLotCreate]

class CatalogImportResult(SQLModel):
    deleted: int
    inserted: int

class PaginatedProductLotRead(SQLModel):
    items: List[ProductLotRead]
    total: int
