"""
Staleness Tracker

Translates change events into stale score rows plus recompute queue items.
Scores are never deleted on change; they are flagged stale and stay
readable until the worker overwrites them.

Every operation takes a Repositories bundle and leaves committing to the
caller's unit of work.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from core.config_loader import ScoringConfig, SignalWeights
from core.utils import utcnow
from database.models import WEIGHTS_FINGERPRINT_KEY

logger = logging.getLogger(__name__)


class RecomputeReason(str, Enum):
    PROFILE_CHANGE = "profile-change"
    SCHEDULE_CHANGE = "schedule-change"
    LISTING_CHANGE = "listing-change"
    TTL_EXPIRY = "ttl-expiry"
    MANUAL = "manual"


REASON_PRIORITIES: Dict[RecomputeReason, int] = {
    RecomputeReason.PROFILE_CHANGE: 10,
    RecomputeReason.SCHEDULE_CHANGE: 10,
    RecomputeReason.LISTING_CHANGE: 7,
    RecomputeReason.TTL_EXPIRY: 3,
    RecomputeReason.MANUAL: 1,
}


@dataclass
class StalenessOutcome:
    scores_marked_stale: int = 0
    enqueued: int = 0
    cancelled: int = 0


class StalenessTracker:
    def __init__(self, scoring: Optional[ScoringConfig] = None):
        self.scoring = scoring or ScoringConfig()

    @staticmethod
    def _enqueue(repos, pairs, reason: RecomputeReason, now: Optional[datetime] = None) -> int:
        return repos.queue.enqueue(pairs, reason=reason.value, priority=REASON_PRIORITIES[reason], now=now)

    def _student_pairs(self, repos, student_id: Any):
        student = repos.profiles.get_student(student_id)
        if student is None:
            logger.warning(f"Student {student_id} not found; nothing to enqueue")
            return []
        return [
            (student_id, listing_id, tenant_id)
            for listing_id, tenant_id in repos.profiles.candidate_listings_for_student(student)
        ]

    def _on_student(self, repos, student_id: Any, reason: RecomputeReason) -> StalenessOutcome:
        marked = repos.scores.mark_stale_for_student(student_id)
        enqueued = self._enqueue(repos, self._student_pairs(repos, student_id), reason)
        logger.info(
            f"{reason.value} for student {student_id}: {marked} scores stale, {enqueued} pairs enqueued"
        )
        return StalenessOutcome(scores_marked_stale=marked, enqueued=enqueued)

    def student_changed(self, repos, student_id: Any) -> StalenessOutcome:
        return self._on_student(repos, student_id, RecomputeReason.PROFILE_CHANGE)

    def schedule_changed(self, repos, student_id: Any) -> StalenessOutcome:
        return self._on_student(repos, student_id, RecomputeReason.SCHEDULE_CHANGE)

    def listing_changed(self, repos, listing_id: Any) -> StalenessOutcome:
        listing = repos.profiles.get_listing(listing_id)
        marked = repos.scores.mark_stale_for_listing(listing_id)
        if listing is None:
            logger.warning(f"Listing {listing_id} not found; nothing to enqueue")
            return StalenessOutcome(scores_marked_stale=marked)

        student_ids = repos.profiles.candidate_student_ids_for_listing(listing)
        pairs = [(sid, listing_id, listing.tenant_id) for sid in student_ids]
        enqueued = self._enqueue(repos, pairs, RecomputeReason.LISTING_CHANGE)
        logger.info(f"listing-change for listing {listing_id}: {marked} scores stale, {enqueued} pairs enqueued")
        return StalenessOutcome(scores_marked_stale=marked, enqueued=enqueued)

    def student_deleted(self, repos, student_id: Any) -> StalenessOutcome:
        return StalenessOutcome(cancelled=repos.queue.cancel_for_student(student_id))

    def listing_deleted(self, repos, listing_id: Any) -> StalenessOutcome:
        return StalenessOutcome(cancelled=repos.queue.cancel_for_listing(listing_id))

    def expire_ttl(self, repos, now: Optional[datetime] = None, tenant_id: Any = None) -> StalenessOutcome:
        """Flag scores older than ttl_hours and enqueue every stale pair at ttl-expiry priority."""
        now = now or utcnow()
        cutoff = now - timedelta(hours=self.scoring.ttl_hours)
        marked = repos.scores.mark_stale_older_than(cutoff, tenant_id=tenant_id)
        enqueued = 0
        if marked:
            enqueued = self._enqueue(repos, repos.scores.get_stale_pairs(tenant_id), RecomputeReason.TTL_EXPIRY, now)
        return StalenessOutcome(scores_marked_stale=marked, enqueued=enqueued)

    def recompute_all(self, repos, tenant_id: Any = None, now: Optional[datetime] = None) -> int:
        """
        Expire TTL rows, then enqueue every stale pair with reason manual.

        Returns the number of stale scores after expiry.
        """
        now = now or utcnow()
        cutoff = now - timedelta(hours=self.scoring.ttl_hours)
        repos.scores.mark_stale_older_than(cutoff, tenant_id=tenant_id)
        stale_pairs = repos.scores.get_stale_pairs(tenant_id)
        self._enqueue(repos, stale_pairs, RecomputeReason.MANUAL, now)
        logger.info(f"Recompute-all (tenant={tenant_id or 'all'}): {len(stale_pairs)} stale scores enqueued")
        return len(stale_pairs)

    def sync_weights_version(self, repos, weights: SignalWeights) -> bool:
        """
        Invalidate every cached score when the active weights changed.

        Returns True when a new fingerprint was detected.
        """
        current = weights.fingerprint()
        stored = repos.settings.get_value(WEIGHTS_FINGERPRINT_KEY)
        if stored == current:
            return False

        marked = repos.scores.mark_all_stale()
        stale_pairs = repos.scores.get_stale_pairs()
        self._enqueue(repos, stale_pairs, RecomputeReason.MANUAL)
        repos.settings.set_value(WEIGHTS_FINGERPRINT_KEY, current)
        logger.warning(
            f"Signal weights changed (version {weights.version}, fingerprint {current}); "
            f"{marked} scores marked stale, {len(stale_pairs)} pairs enqueued"
        )
        return True
