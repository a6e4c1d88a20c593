"""
Trust / reliability from the student's engagement track record.

New users are neither rewarded nor punished: an empty history scores the
new-user prior, and thin rating samples are regressed toward it.
"""

from typing import List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, neutral
from core.utils import clamp01

NEW_USER_SCORE = 0.55
MIN_RATING_SAMPLES = 3

COMPLETION_WEIGHT = 0.60
RATING_WEIGHT = 0.40

FINISHED_STATUSES = ('completed', 'withdrawn', 'dropped')
RATING_MIN = 1.0
RATING_MAX = 5.0


def _normalize_rating(rating: float) -> float:
    return clamp01((rating - RATING_MIN) / (RATING_MAX - RATING_MIN))


def evaluate_trust(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> SignalResult:
    history = student.engagements
    if history is None:
        return neutral(SignalName.TRUST, context, 'engagement history unavailable')

    if not history:
        return SignalResult(
            signal=SignalName.TRUST,
            score=NEW_USER_SCORE,
            details={'is_new_user': True},
        )

    finished = [e for e in history if e.status in FINISHED_STATUSES]
    completed = [e for e in finished if e.status == 'completed']
    if finished:
        completion = len(completed) / len(finished)
    else:
        completion = NEW_USER_SCORE

    ratings = [_normalize_rating(e.rating) for e in history if e.rating is not None]
    if not ratings:
        rating = NEW_USER_SCORE
    elif len(ratings) < MIN_RATING_SAMPLES:
        # Pad thin samples with the prior
        padding = MIN_RATING_SAMPLES - len(ratings)
        rating = (sum(ratings) + padding * NEW_USER_SCORE) / MIN_RATING_SAMPLES
    else:
        rating = sum(ratings) / len(ratings)

    score = COMPLETION_WEIGHT * completion + RATING_WEIGHT * rating

    return SignalResult(
        signal=SignalName.TRUST,
        score=clamp01(score),
        details={
            'is_new_user': False,
            'finished': len(finished),
            'completed': len(completed),
            'completion_score': round(completion, 4),
            'rating_samples': len(ratings),
            'rating_score': round(rating, 4),
        },
    )
