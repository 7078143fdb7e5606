"""Exceptions spécifiques au module Bid.

Chaque refus de validation porte un `reason` stable (InvalidQuantity, InvalidPrice, ...)
affiché à l'acheteur ; aucune de ces erreurs n'est rejouée automatiquement.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

class BidDomainException(Exception):
    """Classe de base pour les exceptions du module Bid."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class BidNotFoundException(BidDomainException):
    """Levée lorsqu'une enchère n'existe pas (ou plus)."""
    def __init__(self, bid_id: int):
        super().__init__(f"Enchère avec ID {bid_id} non trouvée.")
        self.bid_id = bid_id

# --- Validation ---

class BidValidationException(BidDomainException):
    """Refus d'admissibilité d'une enchère."""
    reason = "Validation"

class InvalidQuantityException(BidValidationException):
    reason = "InvalidQuantity"

    def __init__(self, quantity: int):
        super().__init__(f"La quantité doit être strictement positive (reçu: {quantity}).")
        self.quantity = quantity

class InvalidPriceException(BidValidationException):
    reason = "InvalidPrice"

    def __init__(self, unit_price: Decimal):
        super().__init__(f"Le prix unitaire doit être strictement positif (reçu: {unit_price}).")
        self.unit_price = unit_price

class InsufficientInventoryException(BidValidationException):
    reason = "InsufficientInventory"

    def __init__(self, quantity: int, available: int):
        super().__init__(f"La quantité demandée ({quantity}) dépasse la quantité disponible ({available}).")
        self.quantity = quantity
        self.available = available

class DiscountExceedsMaximumException(BidValidationException):
    reason = "DiscountExceedsMaximum"

    def __init__(self, discount_percent: Decimal, max_discount_percent: Decimal):
        super().__init__(
            f"La remise demandée ({discount_percent:.1f}%) dépasse la remise maximale autorisée ({max_discount_percent}%)."
        )
        self.discount_percent = discount_percent
        self.max_discount_percent = max_discount_percent

class InvalidLotPricingException(BidValidationException):
    reason = "InvalidLotPricing"

    def __init__(self, lot_id: Optional[int]):
        super().__init__(f"Le lot ID {lot_id} n'a pas de prix régulier exploitable.")
        self.lot_id = lot_id

class BiddingClosedException(BidValidationException):
    reason = "BiddingClosed"

    def __init__(self, close_bid_date: date):
        super().__init__(f"Les enchères sur ce lot sont closes depuis le {close_bid_date.isoformat()}.")
        self.close_bid_date = close_bid_date

class CaseQuantityMismatchException(BidValidationException):
    reason = "CaseQuantityMismatch"

    def __init__(self, quantity: int, case_quantity: int):
        super().__init__(f"La quantité ({quantity}) doit être un multiple de la quantité par carton ({case_quantity}).")
        self.quantity = quantity
        self.case_quantity = case_quantity

# --- Cycle de vie ---

class InvalidBidTransitionException(BidDomainException):
    """Transition de statut non définie (ex: décision sur une enchère déjà tranchée)."""
    reason = "InvalidTransition"

    def __init__(self, bid_id: int, current_status: str, target: str):
        super().__init__(f"Transition impossible pour l'enchère ID {bid_id}: '{current_status}' -> '{target}'.")
        self.bid_id = bid_id
        self.current_status = current_status
        self.target = target
