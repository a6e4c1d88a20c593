"""
Temporal fit: can the student give the listing the hours it asks for?

Score curve (documented, configurable via ScoringConfig):
- mean available >= required  -> 1.0
- otherwise                   -> max(0, 1 - slope * shortfall / required)
- explicit travel days in any of the first ``critical_weeks`` windows
  multiply the result by ``travel_critical_factor``.
"""

from typing import List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, neutral
from core.utils import clamp01


def evaluate_temporal(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> SignalResult:
    required = listing.hours_per_week
    if not required or required <= 0:
        return neutral(SignalName.TEMPORAL, context, 'listing has no required weekly hours')
    if not windows:
        return neutral(SignalName.TEMPORAL, context, 'no availability windows')

    cfg = context.config
    mean_available = sum(w.available_hours for w in windows) / len(windows)

    if mean_available >= required:
        score = 1.0
    else:
        shortfall = required - mean_available
        score = max(0.0, 1.0 - cfg.temporal_shortfall_slope * shortfall / required)

    critical = windows[:cfg.critical_weeks]
    travel_in_critical = any(w.travel_days > 0 for w in critical)
    if travel_in_critical:
        score *= cfg.travel_critical_factor

    return SignalResult(
        signal=SignalName.TEMPORAL,
        score=clamp01(score),
        details={
            'required_hours': required,
            'mean_available_hours': round(mean_available, 2),
            'weeks': len(windows),
            'travel_in_critical_weeks': travel_in_critical,
        },
    )
