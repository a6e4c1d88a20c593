#!/usr/bin/env python3
"""
Configuration management for the Match Engine web application.

The web app shares the worker's config tree (core/config_loader.py) so both
processes score with the same weights and thresholds.
"""

from functools import lru_cache

from core.app_context import AppContext
from core.config_loader import AppConfig, load_config


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Loads from YAML file and applies environment variable overrides.
    Result is cached for performance.

    Returns:
        AppConfig: The application configuration.
    """
    return load_config()


@lru_cache()
def get_app_context() -> AppContext:
    """Wired engine, tracker and cache built once per process."""
    return AppContext.build(get_config())
