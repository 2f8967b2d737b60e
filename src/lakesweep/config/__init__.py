"""
Configuration management: config.yaml loading, environment resolution and
typed pass settings.
"""

from lakesweep.config.loader import Config, load_config
from lakesweep.config.resolver import resolve_config
from lakesweep.config.settings import ReconcilerSettings, WarehouseSettings

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
    "ReconcilerSettings",
    "WarehouseSettings",
]
