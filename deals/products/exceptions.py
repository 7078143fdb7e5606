"""Exceptions spécifiques au catalogue de lots."""

class ProductDomainException(Exception):
    """Classe de base pour les exceptions du catalogue."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class LotNotFoundException(ProductDomainException):
    """Levée lorsqu'un lot n'existe pas (ou plus, après un import)."""
    def __init__(self, lot_id: int):
        super().__init__(f"Lot avec ID {lot_id} non trouvé.")
        self.lot_id = lot_id

class MalformedLotException(ProductDomainException):
    """Levée lorsqu'un lot stocké ne respecte pas le schéma attendu."""
    def __init__(self, lot_id: int, detail: str):
        super().__init__(f"Lot ID {lot_id} malformé: {detail}")
        self.lot_id = lot_id
        self.detail = detail

class CatalogImportException(ProductDomainException):
    """Levée lorsqu'un import de catalogue échoue (aucune modification appliquée)."""
    def __init__(self, detail: str = "Erreur lors de l'import du catalogue."):
        super().__init__(detail)
        self.detail = detail
