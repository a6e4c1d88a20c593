"""Shared types for signal evaluators."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from core.config_loader import ScoringConfig
from core.matching.models import (
    AvailabilityWindow,
    ListingProfile,
    SignalName,
    SignalResult,
    StudentProfile,
)
from core.utils import utcnow


@dataclass
class EvaluationContext:
    """Inputs shared by every evaluator for one (student, listing) pair."""
    config: ScoringConfig = field(default_factory=ScoringConfig)
    as_of: datetime = field(default_factory=utcnow)


SignalEvaluator = Callable[
    [StudentProfile, ListingProfile, List[AvailabilityWindow], EvaluationContext],
    SignalResult,
]


def neutral(
    signal: SignalName,
    context: EvaluationContext,
    reason: str,
    details: Optional[Dict[str, Any]] = None,
) -> SignalResult:
    """Neutral fallback used when a signal lacks the data it needs."""
    payload = dict(details or {})
    payload['reason'] = reason
    return SignalResult(
        signal=signal,
        score=context.config.neutral_score,
        details=payload,
        fallback=True,
    )


def normalize_skill(name: str) -> str:
    return (name or '').strip().lower()
