#!/usr/bin/env python3
"""
Change notification service - entry point for the subsystems that own
students and listings.

Profile and listing writes happen outside this service; their owners notify
us so cached scores are flagged stale and recomputation is enqueued. A
deletion only cancels pending recomputes; the score rows go with the
deleted entity.
"""

import logging
from typing import Any

from core.matching.staleness import StalenessOutcome, StalenessTracker
from database.uow import Repositories
from ..models.responses import ChangeNotificationResponse
from ..exceptions import ListingNotFoundException, StudentNotFoundException

logger = logging.getLogger(__name__)


def outcome_out(outcome: StalenessOutcome) -> ChangeNotificationResponse:
    return ChangeNotificationResponse(
        scores_marked_stale=outcome.scores_marked_stale,
        enqueued=outcome.enqueued,
        cancelled=outcome.cancelled,
    )


class ChangeNotificationService:
    """Routes collaborator change notifications to the staleness tracker."""

    def __init__(self, repos: Repositories, tracker: StalenessTracker):
        self.repos = repos
        self.tracker = tracker

    def _commit(self, outcome: StalenessOutcome) -> ChangeNotificationResponse:
        self.repos.session.commit()
        return outcome_out(outcome)

    def student_changed(self, student_id: Any) -> ChangeNotificationResponse:
        """
        Skills, interests or engagement history of a student changed.

        Raises:
            StudentNotFoundException: if the student does not exist.
        """
        if self.repos.profiles.get_student(student_id) is None:
            raise StudentNotFoundException(f"Student {student_id} not found")
        return self._commit(self.tracker.student_changed(self.repos, student_id))

    def listing_changed(self, listing_id: Any) -> ChangeNotificationResponse:
        """
        Requirements, hours, dates or visibility of a listing changed.

        Raises:
            ListingNotFoundException: if the listing does not exist.
        """
        if self.repos.profiles.get_listing(listing_id) is None:
            raise ListingNotFoundException(f"Listing {listing_id} not found")
        return self._commit(self.tracker.listing_changed(self.repos, listing_id))

    def student_deleted(self, student_id: Any) -> ChangeNotificationResponse:
        outcome = self.tracker.student_deleted(self.repos, student_id)
        logger.info(f"Student {student_id} deleted: {outcome.cancelled} pending recomputes cancelled")
        return self._commit(outcome)

    def listing_deleted(self, listing_id: Any) -> ChangeNotificationResponse:
        outcome = self.tracker.listing_deleted(self.repos, listing_id)
        logger.info(f"Listing {listing_id} deleted: {outcome.cancelled} pending recomputes cancelled")
        return self._commit(outcome)
