#!/usr/bin/env python3
"""
Matching Module - compatibility scoring for (student, listing) pairs.

Public API:
- MatchEngine: computes and persists one pair's score
- StalenessTracker: turns change events into stale rows + queue items
- build_availability_windows: weekly availability projection
- compute_composite: weighted composite over the six signals

Layout:
- models.py: Detached DTOs (profiles, windows, signal results)
- availability.py: Availability Window Builder
- signals/: One evaluator per signal
- composite.py: Composite scorer
- engine.py: MatchEngine orchestrator
- staleness.py: Staleness tracker and recompute reasons/priorities
"""

from core.matching.availability import build_availability_windows
from core.matching.composite import compute_composite
from core.matching.engine import EntityNotFoundError, MatchEngine
from core.matching.models import AvailabilityLevel, AvailabilityWindow, CompositeResult, SignalName, SignalResult
from core.matching.staleness import REASON_PRIORITIES, RecomputeReason, StalenessTracker

__all__ = [
    'MatchEngine', 'EntityNotFoundError', 'StalenessTracker', 'RecomputeReason', 'REASON_PRIORITIES',
    'build_availability_windows', 'compute_composite',
    'AvailabilityLevel', 'AvailabilityWindow', 'CompositeResult', 'SignalName', 'SignalResult',
]
