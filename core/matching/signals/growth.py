"""
Growth trajectory: does the listing stretch the student in a direction they want?

A listing that teaches nothing new scores low; one that teaches skills the
student declared interest in scores high. A moderate skill gap (15-45% of
the required skills missing) is the sweet spot.
"""

from typing import List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, neutral, normalize_skill
from core.utils import clamp01

IDEAL_GAP_MIN = 0.15
IDEAL_GAP_MAX = 0.45

INTEREST_ALIGNED = 1.0
NEW_BUT_UNINTERESTING = 0.3
NOTHING_NEW = 0.2

INTEREST_WEIGHT = 0.60
GAP_WEIGHT = 0.40


def gap_score(gap_ratio: float) -> float:
    """Piecewise score peaking inside [IDEAL_GAP_MIN, IDEAL_GAP_MAX]."""
    if IDEAL_GAP_MIN <= gap_ratio <= IDEAL_GAP_MAX:
        return 1.0
    if gap_ratio < IDEAL_GAP_MIN:
        return 0.6 + gap_ratio * 2.0
    if gap_ratio <= 0.6:
        return 0.8 - (gap_ratio - IDEAL_GAP_MAX) * 1.5
    return max(0.1, 0.5 - (gap_ratio - 0.6))


def evaluate_growth(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> SignalResult:
    if not student.interests:
        return neutral(SignalName.GROWTH, context, 'no declared interests')

    required = []
    for skill in listing.skills_required:
        key = normalize_skill(skill)
        if key and key not in required:
            required.append(key)
    if not required:
        return neutral(SignalName.GROWTH, context, 'listing requires no skills')

    student_skills = {normalize_skill(s.name) for s in student.skills}
    interests = {normalize_skill(i) for i in student.interests}
    new_skills = [s for s in required if s not in student_skills]

    if not new_skills:
        interest = NOTHING_NEW
    elif any(s in interests for s in new_skills):
        interest = INTEREST_ALIGNED
    else:
        interest = NEW_BUT_UNINTERESTING

    gap_ratio = len(new_skills) / len(required)
    gap = gap_score(gap_ratio)
    score = INTEREST_WEIGHT * interest + GAP_WEIGHT * gap

    return SignalResult(
        signal=SignalName.GROWTH,
        score=clamp01(score),
        details={
            'new_skills': new_skills,
            'interest_score': interest,
            'gap_ratio': round(gap_ratio, 2),
            'gap_score': round(gap, 4),
        },
    )
