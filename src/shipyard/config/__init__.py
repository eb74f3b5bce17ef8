"""
Configuration package initialization.

Type-safe settings for the reconcile driver and CLI, loaded from YAML files
and environment variables, plus the explicit configuration value of a fleet
decommission run.
"""

from .settings import DecommissionConfig, LogFormat, ShipyardSettings, load_settings

__all__ = [
    "ShipyardSettings",
    "DecommissionConfig",
    "LogFormat",
    "load_settings",
]
