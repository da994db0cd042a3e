"""
Storage for CostOf.Life.

Keeps expense records in a content addressed ledger persisted to a text file.
"""

from .ledger import Ledger

__all__ = ["Ledger"]
