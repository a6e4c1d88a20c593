"""Skills alignment: fraction of the listing's required skills the student has."""

from typing import List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, normalize_skill


def evaluate_skills(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> SignalResult:
    student_skills = {normalize_skill(s.name) for s in student.skills}

    matched: List[str] = []
    missing: List[str] = []
    seen = set()
    for skill in listing.skills_required:
        key = normalize_skill(skill)
        if not key or key in seen:
            continue
        seen.add(key)
        (matched if key in student_skills else missing).append(skill)

    required = len(matched) + len(missing)
    # Nothing required: any student qualifies
    score = len(matched) / required if required else 1.0

    return SignalResult(
        signal=SignalName.SKILLS,
        score=score,
        details={
            'matched_skills': matched,
            'missing_skills': missing,
            'required_count': required,
        },
    )
