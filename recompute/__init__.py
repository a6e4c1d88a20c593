"""Recompute Module - durable queue draining for stale match scores."""
from recompute.service import RecomputeService, compute_backoff_seconds
from recompute.worker import RecomputeWorker, CycleResult

__all__ = ['RecomputeService', 'RecomputeWorker', 'CycleResult', 'compute_backoff_seconds']
