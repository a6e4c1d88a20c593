"""
Recompute Service - queue-facing operations shared by the API and the worker.
"""

import logging
from typing import Any, Dict, Optional

from core.config_loader import AppConfig
from core.matching.staleness import StalenessTracker

logger = logging.getLogger(__name__)


def compute_backoff_seconds(attempts: int, base_seconds: float, max_seconds: float) -> float:
    """Exponential backoff: base * 2^(attempts-1), capped at max_seconds."""
    if attempts < 1:
        return 0.0
    return min(float(max_seconds), float(base_seconds) * (2 ** (attempts - 1)))


class RecomputeService:
    def __init__(self, config: AppConfig, tracker: Optional[StalenessTracker] = None):
        self.config = config
        self.tracker = tracker or StalenessTracker(config.scoring)

    def recompute_all(self, repos, tenant_id: Any = None) -> int:
        return self.tracker.recompute_all(repos, tenant_id=tenant_id)

    def get_stats(self, repos, tenant_id: Any = None) -> Dict[str, Dict[str, Any]]:
        return {
            'scores': repos.scores.get_stats(tenant_id),
            'queue': repos.queue.get_counts(tenant_id),
        }

    def backoff_for(self, attempts: int) -> float:
        queue = self.config.queue
        return compute_backoff_seconds(attempts, queue.backoff_base_seconds, queue.backoff_max_seconds)
