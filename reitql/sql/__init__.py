from __future__ import annotations

from .joins import SearchRoot, get_root, TRANSACTION_SEARCH, BUILDING_SEARCH
from .storage import SQLStorage

__all__ = [
    'SearchRoot',
    'get_root',
    'TRANSACTION_SEARCH',
    'BUILDING_SEARCH',
    'SQLStorage',
]
