"""Cache Module - Caching services."""
from core.cache.availability_cache import (
    AvailabilityCacheService,
    get_availability_cache,
    init_availability_cache,
    CACHE_TTL_SECONDS
)

__all__ = [
    'AvailabilityCacheService',
    'get_availability_cache',
    'init_availability_cache',
    'CACHE_TTL_SECONDS'
]
