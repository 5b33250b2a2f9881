"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.sheet_api_connector import SheetAPIConnector

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "SheetAPIConnector",
]
