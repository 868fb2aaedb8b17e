"""Storage module for baseline character sheets.

Provides the BaselineStore protocol and its SQLite implementation.
"""

from clashkeeper.storage.base import BaselineStore
from clashkeeper.storage.database import BaselineDatabase

__all__ = [
    "BaselineStore",
    "BaselineDatabase",
]
