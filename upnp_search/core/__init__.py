"""
Core components for UPnP search functionality.
"""

from .data_models import (
    DeviceRecord,
    SortKey,
    SearchOptions,
    SearchStatus,
    SearchResult,
    normalize_serial_number,
)

__all__ = [
    'DeviceRecord',
    'SortKey',
    'SearchOptions',
    'SearchStatus',
    'SearchResult',
    'normalize_serial_number'
]
