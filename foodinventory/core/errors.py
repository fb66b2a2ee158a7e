"""Exceptions raised by the resolver and ledger services.

Expected catalog outcomes (unknown barcode, lookup timeout) are not
exceptions; see ``services.resolver.ResolveStatus``.
"""


class EntryNotFound(Exception):
    """No inventory entry exists for the barcode."""

    def __init__(self, barcode: str):
        super().__init__(f"No inventory entry for EAN {barcode}")
        self.barcode = barcode


class ProductNotFound(Exception):
    """No product row exists for the barcode."""

    def __init__(self, barcode: str):
        super().__init__(f"No product for EAN {barcode}")
        self.barcode = barcode


class CatalogError(Exception):
    """The product catalog answered, but not with anything usable."""
