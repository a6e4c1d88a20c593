"""
Signal evaluators.

One pure function per SignalName, iterated in the fixed enum order:

- skills.py: Skills alignment
- temporal.py: Temporal fit against availability windows
- sustainability.py: Workload / burnout risk
- growth.py: Growth trajectory
- trust.py: Reliability track record
- network.py: Tenant/network proximity
"""

import logging
from typing import Dict, List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, SignalEvaluator, neutral
from core.matching.signals.growth import evaluate_growth
from core.matching.signals.network import evaluate_network
from core.matching.signals.skills import evaluate_skills
from core.matching.signals.sustainability import evaluate_sustainability
from core.matching.signals.temporal import evaluate_temporal
from core.matching.signals.trust import evaluate_trust

logger = logging.getLogger(__name__)

SIGNAL_EVALUATORS: Dict[SignalName, SignalEvaluator] = {
    SignalName.SKILLS: evaluate_skills,
    SignalName.TEMPORAL: evaluate_temporal,
    SignalName.SUSTAINABILITY: evaluate_sustainability,
    SignalName.GROWTH: evaluate_growth,
    SignalName.TRUST: evaluate_trust,
    SignalName.NETWORK: evaluate_network,
}

# Malformed collaborator data; anything else propagates to the worker's retry path
DATA_ERRORS = (ValueError, TypeError, KeyError, AttributeError, ZeroDivisionError)


def evaluate_signals(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> List[SignalResult]:
    """Run every evaluator in SignalName order, converting data errors to neutral fallbacks."""
    results = []
    for signal in SignalName:
        evaluator = SIGNAL_EVALUATORS[signal]
        try:
            results.append(evaluator(student, listing, windows, context))
        except DATA_ERRORS as e:
            logger.warning(
                f"Signal {signal.value} failed for student={student.id} listing={listing.id}: {e}"
            )
            results.append(neutral(signal, context, f'evaluation error: {type(e).__name__}'))
    return results


__all__ = [
    'EvaluationContext', 'SignalEvaluator', 'SIGNAL_EVALUATORS',
    'evaluate_signals', 'neutral',
    'evaluate_skills', 'evaluate_temporal', 'evaluate_sustainability',
    'evaluate_growth', 'evaluate_trust', 'evaluate_network',
]
