from dataclasses import dataclass
from typing import Optional

from core.cache.availability_cache import AvailabilityCacheService, init_availability_cache
from core.config_loader import AppConfig
from core.matching.engine import MatchEngine
from core.matching.staleness import StalenessTracker
from recompute.service import RecomputeService


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Shared by the worker entrypoint and the web app so both wire the
    engine, tracker and cache the same way. DB access should be obtained
    via match_uow() (or a request session) per operation.
    """
    config: AppConfig
    engine: MatchEngine
    tracker: StalenessTracker
    recompute_service: RecomputeService
    cache: Optional[AvailabilityCacheService] = None

    @classmethod
    def build(cls, config: AppConfig) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration

        Returns:
            Fully wired AppContext instance (no DB session attached)
        """
        cache = cls._build_cache(config)
        tracker = StalenessTracker(config.scoring)
        return cls(
            config=config,
            engine=MatchEngine(config, cache),
            tracker=tracker,
            recompute_service=RecomputeService(config, tracker),
            cache=cache,
        )

    @staticmethod
    def _build_cache(config: AppConfig) -> Optional[AvailabilityCacheService]:
        """Build the Redis availability cache if enabled in config."""
        if not config.cache.enabled:
            return None
        return init_availability_cache(config.cache.redis_url, config.cache.ttl_seconds)
