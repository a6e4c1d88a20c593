#!/usr/bin/env python3
"""
Match service - read side of the score cache.

Reads never block on recomputation: stale scores are returned as-is (flagged
isStale) and candidates without a score are enqueued instead of computed
inline.
"""

import logging
from typing import Any, List

from core.matching.staleness import REASON_PRIORITIES, RecomputeReason
from database.uow import Repositories
from ..models.responses import ListingMatch, StudentMatch
from ..utils import safe_datetime_iso, safe_float, safe_id
from ..exceptions import ListingNotFoundException, StudentNotFoundException

logger = logging.getLogger(__name__)


class MatchService:
    """Service for ranked match queries."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def _enqueue_unscored(self, pairs) -> int:
        if not pairs:
            return 0
        count = self.repos.queue.enqueue(
            pairs,
            reason=RecomputeReason.MANUAL.value,
            priority=REASON_PRIORITIES[RecomputeReason.MANUAL],
        )
        self.repos.session.commit()
        logger.info(f"Enqueued {count} unscored candidate pairs")
        return count

    def get_listing_matches(self, listing_id: Any, limit: int) -> List[ListingMatch]:
        """
        Top students for a listing, composite desc then earliest computed.

        Raises:
            ListingNotFoundException: if the listing does not exist.
        """
        listing = self.repos.profiles.get_listing(listing_id)
        if listing is None:
            raise ListingNotFoundException(f"Listing {listing_id} not found")

        rows = self.repos.scores.get_top_for_listing(listing_id, limit=limit)
        matches = [
            ListingMatch(
                student_id=safe_id(student.id),
                first_name=student.first_name or '',
                last_name=student.last_name or '',
                email=student.email or '',
                university=student.university,
                composite_score=score.composite_score,
                matched_skills=list(score.matched_skills or []),
                missing_skills=list(score.missing_skills or []),
                signals=dict(score.signals or {}),
                is_stale=bool(score.is_stale),
                computed_at=safe_datetime_iso(score.computed_at),
            )
            for score, student in rows
        ]

        scored = set(self.repos.scores.get_scored_student_ids(listing_id))
        candidates = self.repos.profiles.candidate_student_ids_for_listing(listing)
        self._enqueue_unscored([
            (sid, listing.id, listing.tenant_id) for sid in candidates if sid not in scored
        ])
        return matches

    def get_student_matches(self, student_id: Any, limit: int) -> List[StudentMatch]:
        """
        Top listings for a student.

        Raises:
            StudentNotFoundException: if the student does not exist.
        """
        student = self.repos.profiles.get_student(student_id)
        if student is None:
            raise StudentNotFoundException(f"Student {student_id} not found")

        rows = self.repos.scores.get_top_for_student(student_id, limit=limit)
        matches = [
            StudentMatch(
                listing_id=safe_id(listing.id),
                title=listing.title,
                tenant_id=safe_id(listing.tenant_id),
                hours_per_week=safe_float(listing.hours_per_week, default=None),
                composite_score=score.composite_score,
                matched_skills=list(score.matched_skills or []),
                missing_skills=list(score.missing_skills or []),
                signals=dict(score.signals or {}),
                is_stale=bool(score.is_stale),
                computed_at=safe_datetime_iso(score.computed_at),
            )
            for score, listing in rows
        ]

        scored = set(self.repos.scores.get_scored_listing_ids(student_id))
        candidates = self.repos.profiles.candidate_listings_for_student(student)
        self._enqueue_unscored([
            (student.id, lid, tenant_id) for lid, tenant_id in candidates if lid not in scored
        ])
        return matches
