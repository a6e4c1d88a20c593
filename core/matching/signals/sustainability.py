"""
Sustainability: would taking this listing overload the student?

Combines a workload tier (existing accepted hours + this listing) with a
concurrency tier (number of active engagements).
"""

from typing import List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, neutral
from core.utils import clamp01

# Hours a listing or engagement is assumed to take when it does not say
DEFAULT_LISTING_HOURS = 15.0
DEFAULT_ENGAGEMENT_HOURS = 10.0

COMFORTABLE_HOURS = 30.0
BUSY_HOURS = 40.0
MAX_SUSTAINABLE_HOURS = 50.0

IDEAL_CONCURRENT = 1
MAX_CONCURRENT = 3

WORKLOAD_WEIGHT = 0.70
CONCURRENCY_WEIGHT = 0.30

ACTIVE_STATUSES = ('accepted',)


def workload_score(total_hours: float) -> float:
    if total_hours <= COMFORTABLE_HOURS:
        return 1.0
    if total_hours <= BUSY_HOURS:
        return 0.85
    if total_hours <= MAX_SUSTAINABLE_HOURS:
        return 0.65
    overload = total_hours - MAX_SUSTAINABLE_HOURS
    return max(0.1, 0.5 - 0.03 * overload)


def concurrency_score(active: int) -> float:
    if active <= IDEAL_CONCURRENT:
        return 1.0
    if active <= 2:
        return 0.75
    if active <= MAX_CONCURRENT:
        return 0.5
    return max(0.1, 0.4 - (active - MAX_CONCURRENT) * 0.15)


def evaluate_sustainability(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> SignalResult:
    if student.engagements is None:
        return neutral(SignalName.SUSTAINABILITY, context, 'engagement history unavailable')

    active = [
        e for e in student.engagements
        if e.status in ACTIVE_STATUSES and e.listing_id != listing.id
    ]
    existing_hours = sum(
        e.hours_per_week if e.hours_per_week is not None else DEFAULT_ENGAGEMENT_HOURS
        for e in active
    )
    listing_hours = listing.hours_per_week or DEFAULT_LISTING_HOURS
    total_hours = existing_hours + listing_hours

    workload = workload_score(total_hours)
    concurrency = concurrency_score(len(active))
    score = WORKLOAD_WEIGHT * workload + CONCURRENCY_WEIGHT * concurrency

    return SignalResult(
        signal=SignalName.SUSTAINABILITY,
        score=clamp01(score),
        details={
            'existing_hours': existing_hours,
            'listing_hours': listing_hours,
            'total_hours': total_hours,
            'active_engagements': len(active),
            'workload_score': workload,
            'concurrency_score': concurrency,
        },
    )
