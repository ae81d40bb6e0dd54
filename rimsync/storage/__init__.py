"""
Storage Layer.

This package handles reading the mod manifest and the optional INI configuration file.
"""

from .config_manager import ConfigManager
from .manifest import load_manifest

__all__ = ["ConfigManager", "load_manifest"]
