#!/usr/bin/env python3
"""
Match Engine - computes and persists the composite score for one pair.

Flow per (student, listing):
1. Load detached student/listing profiles.
2. Build availability windows over the listing's active duration
   (served from the Redis cache when the schedule fingerprint matches).
3. Run the six signal evaluators in fixed order.
4. Combine into a composite with the configured SignalWeights.
5. Upsert the MatchScore row (clears is_stale) and record history.
"""

import logging
import time
from dataclasses import asdict
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Tuple

from core.config_loader import AppConfig
from core.matching.availability import build_availability_windows
from core.matching.composite import compute_composite
from core.matching.models import AvailabilityWindow, CompositeResult, ListingProfile, StudentProfile
from core.matching.signals import EvaluationContext, evaluate_signals
from core.utils import stable_fingerprint, utcnow

logger = logging.getLogger(__name__)


class EntityNotFoundError(LookupError):
    """Student or listing referenced by a recompute no longer exists."""


class MatchEngine:
    def __init__(self, config: AppConfig, cache=None):
        # cache: optional AvailabilityCacheService
        self.config = config
        self.cache = cache

    def listing_range(self, listing: ListingProfile, as_of: datetime) -> Tuple[date, date]:
        """Active duration of a listing; open-ended listings get a default horizon."""
        start = listing.start_date or as_of.date()
        if listing.end_date and listing.end_date >= start:
            end = listing.end_date
        else:
            end = start + timedelta(weeks=self.config.availability.default_listing_weeks) - timedelta(days=1)
        return start, end

    def build_windows(self, repos, student_id: Any, start: date, end: date) -> List[AvailabilityWindow]:
        schedules = repos.schedules.get_schedule_data(student_id)

        key = None
        if self.cache is not None and self.cache.is_available:
            fingerprint = stable_fingerprint({
                'schedules': [asdict(s) for s in schedules],
                'availability': self.config.availability.model_dump(),
            })
            key = self.cache.make_key(student_id, fingerprint, start, end)
            cached = self.cache.get_windows(key)
            if cached is not None:
                return cached

        windows = build_availability_windows(schedules, start, end, self.config.availability)
        if key is not None:
            self.cache.set_windows(key, windows)
        return windows

    def evaluate(
        self,
        student: StudentProfile,
        listing: ListingProfile,
        windows: List[AvailabilityWindow],
        as_of: Optional[datetime] = None,
    ) -> CompositeResult:
        """Pure scoring: same inputs and weights always give the same result."""
        context = EvaluationContext(config=self.config.scoring, as_of=as_of or utcnow())
        results = evaluate_signals(student, listing, windows, context)
        return compute_composite(results, self.config.scoring.weights)

    def compute_pair(
        self,
        repos,
        student_id: Any,
        listing_id: Any,
        reason: Optional[str] = None,
        as_of: Optional[datetime] = None,
    ):
        """
        Recompute and persist the score for one pair.

        Raises:
            EntityNotFoundError: if the student or listing is gone.
        """
        as_of = as_of or utcnow()
        started = time.perf_counter()

        student = repos.profiles.get_student_profile(student_id)
        if student is None:
            raise EntityNotFoundError(f"Student {student_id} not found")
        listing = repos.profiles.get_listing_profile(listing_id)
        if listing is None:
            raise EntityNotFoundError(f"Listing {listing_id} not found")

        start, end = self.listing_range(listing, as_of)
        windows = self.build_windows(repos, student_id, start, end)
        result = self.evaluate(student, listing, windows, as_of)

        elapsed_ms = int(round((time.perf_counter() - started) * 1000))
        score = repos.scores.upsert(
            student_id=student_id,
            listing_id=listing_id,
            tenant_id=listing.tenant_id,
            result=result,
            computation_ms=elapsed_ms,
            computed_at=as_of,
            reason=reason,
        )
        logger.debug(
            f"Scored student={student_id} listing={listing_id}: {result.composite_score} "
            f"({elapsed_ms}ms, fallbacks={result.fallback_signals})"
        )
        return score
