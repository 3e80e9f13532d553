"""
Column configuration backend port (abstract interface).

Defines the contract for the col-def endpoint: persisted grid
configuration plus live database schema inspection.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any


class ColumnConfigError(Exception):
    """Transport failure, non-2xx status, or an unreadable response body."""

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status


class ColumnConfigPort(ABC):
    """Abstract interface for column configuration storage."""

    # --- Grid configuration ---

    @abstractmethod
    def load_config(self, page_name: str, table_name: str) -> Dict[str, Any]:
        """Raw col-def record for a page/table (may be empty)."""
        ...

    @abstractmethod
    def save_config(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    # --- Database schema ---

    @abstractmethod
    def check_columns(self, table_name: str, fields: List[str]) -> Dict[str, bool]:
        """Map of field -> exists in the table."""
        ...

    @abstractmethod
    def get_all_columns(self, table_name: str) -> List[Dict[str, Any]]:
        """Full live schema as [{field, headerName?, type?}]."""
        ...

    @abstractmethod
    def add_columns(self, table_name: str, specs: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Returns {addedColumns: [...], failedColumns: [{name, error}]}."""
        ...

    @abstractmethod
    def delete_column(self, table_name: str, field: str) -> Dict[str, Any]:
        """Returns {success, message?}."""
        ...
