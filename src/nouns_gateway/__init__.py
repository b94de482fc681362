"""
Nouns governance query gateway.
"""

from .config import GatewaySettings, get_settings
from .enums import CollectionName, ServiceEndpoint


__version__ = "0.1.0"

__all__ = [
    "CollectionName",
    "GatewaySettings",
    "ServiceEndpoint",
    "get_settings",
]
