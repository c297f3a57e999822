"""
Configuration module for Tickbooks.
"""
from .settings import (
    TickbooksConfig,
    get_config,
    load_config,
    normalize_tick_url,
    reload_config,
)

__all__ = [
    'TickbooksConfig',
    'get_config',
    'load_config',
    'normalize_tick_url',
    'reload_config',
]
