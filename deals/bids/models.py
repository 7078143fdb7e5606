"""
Modèles des enchères.

Une enchère fige un instantané du lot au moment de la soumission
(nom du produit, prix régulier, image) ainsi que la remise et la valeur
totale calculées par le validateur.
"""
import enum
from typing import Optional, List
from decimal import Decimal
from datetime import datetime, timezone

from sqlalchemy import Numeric
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, ConfigDict, EmailStr


class BidStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

# Décisions administratives possibles depuis 'pending'
DECISION_STATUSES = (BidStatus.APPROVED, BidStatus.REJECTED)


class BidTerms(BaseModel):
    """Conditions d'une enchère acceptée par le validateur (aucun état persistant)."""
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal
    total_value: Decimal

    model_config = ConfigDict(frozen=True)


# --- Modèle Bid SQLModel ---

class BidBase(SQLModel):
    user_id: int = Field(index=True)
    user_email: EmailStr = Field(max_length=255)
    # Pas de clé étrangère : un import de catalogue supprime les lots, l'enchère garde son instantané.
    product_id: int = Field(index=True)
    product_name: str = Field(max_length=500)
    quantity: int
    image_url: Optional[str] = Field(default=None, max_length=1024)

class Bid(BidBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    bid_price: Decimal = Field(sa_type=Numeric(12, 2))
    regular_price: Decimal = Field(sa_type=Numeric(12, 2))
    discount_percent: Decimal = Field(sa_type=Numeric(12, 4))
    total_value: Decimal = Field(sa_type=Numeric(14, 2))
    status: str = Field(default=BidStatus.PENDING.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False)
    decided_at: Optional[datetime] = Field(default=None)

    __tablename__ = "bids"

# Schémas API pour Bid

class BidCreate(SQLModel):
    """Offre soumise par un acheteur. Les règles d'admissibilité sont appliquées par le validateur."""
    product_id: int
    quantity: int
    bid_price: Decimal = Field(..., max_digits=12, decimal_places=2)

class BidRead(BidBase):
    id: int
    bid_price: Decimal
    regular_price: Decimal
    discount_percent: Decimal
    total_value: Decimal
    status: BidStatus
    created_at: datetime
    decided_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BidDecision(SQLModel):
    """Décision administrative sur une enchère en attente."""
    status: BidStatus

class PaginatedBidRead(SQLModel):
    items: List[BidRead]
    total: int
