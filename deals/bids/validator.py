"""
Validation d'admissibilité d'une enchère contre l'instantané d'un lot.

Fonction pure : aucune écriture, aucun accès au stockage ni à l'horloge.
Les mêmes entrées produisent toujours la même décision.
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from deals.bids.exceptions import (
    BiddingClosedException,
    CaseQuantityMismatchException,
    DiscountExceedsMaximumException,
    InsufficientInventoryException,
    InvalidLotPricingException,
    InvalidPriceException,
    InvalidQuantityException,
)
from deals.bids.models import BidTerms

DISCOUNT_QUANTUM = Decimal("0.0001")
MONEY_QUANTUM = Decimal("0.01")

Number = Union[int, float, str, Decimal]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() évite d'embarquer l'erreur de représentation binaire des floats
    return Decimal(str(value))


def compute_discount_percent(regular_price: Number, unit_price: Number) -> Decimal:
    """(prix régulier - prix offert) / prix régulier x 100, non arrondi."""
    regular = _to_decimal(regular_price)
    return (regular - _to_decimal(unit_price)) / regular * 100


def validate_bid(
    lot,
    quantity: int,
    unit_price: Number,
    *,
    today: Optional[date] = None,
    enforce_case_quantity: bool = False,
) -> BidTerms:
    """Décide de l'admissibilité d'une offre (quantité, prix unitaire) sur un lot.

    `lot` expose regular_price, quantity_available, max_discount_percent,
    case_quantity et close_bid_date (typiquement un ProductLotRead).

    La date de clôture n'est vérifiée que si `today` est fourni, le multiple de
    carton que si `enforce_case_quantity` est vrai.

    Le prix unitaire est arrondi au centime (HALF_UP) avant tout calcul, de
    sorte que total_value == unit_price x quantity sur l'enregistrement stocké.

    Returns:
        BidTerms avec la remise et la valeur totale à persister.

    Raises:
        BidValidationException: sous-classe correspondant au premier refus rencontré.
    """
    if today is not None and lot.close_bid_date is not None and today > lot.close_bid_date:
        raise BiddingClosedException(lot.close_bid_date)

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityException(quantity)

    price = _to_decimal(unit_price)
    if not price.is_finite():
        raise InvalidPriceException(price)
    # Le prix stocké est au centime : remise et total sont calculés sur ce prix-là
    price = price.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    if price <= 0:
        raise InvalidPriceException(price)

    if quantity > lot.quantity_available:
        raise InsufficientInventoryException(quantity, lot.quantity_available)

    if enforce_case_quantity and lot.case_quantity and quantity % lot.case_quantity != 0:
        raise CaseQuantityMismatchException(quantity, lot.case_quantity)

    regular = _to_decimal(lot.regular_price)
    if not regular.is_finite() or regular <= 0:
        raise InvalidLotPricingException(getattr(lot, "id", None))

    discount = compute_discount_percent(regular, price)
    max_discount = _to_decimal(lot.max_discount_percent)
    if discount > max_discount:
        raise DiscountExceedsMaximumException(discount, max_discount)

    return BidTerms(
        quantity=quantity,
        unit_price=price,
        discount_percent=discount.quantize(DISCOUNT_QUANTUM, rounding=ROUND_HALF_UP),
        total_value=(price * quantity).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP),
    )
