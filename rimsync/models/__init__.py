"""
Data Models Layer.

This package contains the core data structures used throughout the application:
the validated run configuration, workshop items and run statistics.
"""

from .config import SyncConfig
from .item import ItemPaths, WorkshopItem
from .stats import SyncStats

__all__ = ["ItemPaths", "SyncConfig", "SyncStats", "WorkshopItem"]
