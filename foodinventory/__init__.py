"""Household food inventory keyed by barcode."""

__version__ = "0.1.0"
