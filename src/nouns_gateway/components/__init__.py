"""
Gateway components.
"""

from .document_store import (
    DocumentStore,
    StoreConnectionError,
    StoreError,
    StoreNotConnectedError,
)


__all__ = [
    "DocumentStore",
    "StoreConnectionError",
    "StoreError",
    "StoreNotConnectedError",
]
