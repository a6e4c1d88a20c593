#!/usr/bin/env python3
"""
Composite Scorer

composite = round_half_up(100 * sum(score_i * weight_i)), clamped to [0, 100],
where score_i is the per-signal score rounded to SCORE_PRECISION places and
persisted as-is in the breakdown.

Weights come from the versioned SignalWeights config and are passed in, never
read from module state, so the same inputs always give the same composite.
"""

import logging
from typing import List

from core.config_loader import SignalWeights
from core.matching.models import CompositeResult, SignalName, SignalResult
from core.utils import clamp, clamp01, round_half_up

logger = logging.getLogger(__name__)

SCORE_PRECISION = 4


def compute_composite(results: List[SignalResult], weights: SignalWeights) -> CompositeResult:
    """
    Combine per-signal results into a composite score and breakdown.

    Raises:
        ValueError: if a signal is missing from ``results``.
    """
    by_signal = {r.signal: r for r in results}
    missing = [s.value for s in SignalName if s not in by_signal]
    if missing:
        raise ValueError(f"Missing signal results: {missing}")

    weight_map = weights.as_dict()
    total = 0.0
    breakdown = {}
    fallback_signals = []

    for signal in SignalName:
        result = by_signal[signal]
        weight = weight_map[signal.value]
        # The stored breakdown must reproduce the composite exactly
        score = round(clamp01(result.score), SCORE_PRECISION)
        total += score * weight
        breakdown[signal.value] = {
            'score': score,
            'weight': weight,
            'fallback': result.fallback,
            'details': result.details,
        }
        if result.fallback:
            fallback_signals.append(signal.value)

    composite = int(clamp(round_half_up(100 * total), 0, 100))
    skills_details = by_signal[SignalName.SKILLS].details

    return CompositeResult(
        composite_score=composite,
        signals=breakdown,
        matched_skills=list(skills_details.get('matched_skills', [])),
        missing_skills=list(skills_details.get('missing_skills', [])),
        fallback_signals=fallback_signals,
        weights_version=weights.version,
    )
