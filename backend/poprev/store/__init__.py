"""
Content store implementations.
"""

from poprev.store.base import ContentStore, ResponsePage, ResponseQuery
from poprev.store.memory import InMemoryContentStore
from poprev.store.sql import SqlContentStore

__all__ = [
    "ContentStore",
    "ResponsePage",
    "ResponseQuery",
    "InMemoryContentStore",
    "SqlContentStore",
]
