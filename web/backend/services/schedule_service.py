#!/usr/bin/env python3
"""
Schedule service - the calling student's own schedule entries.

Every write marks the student's scores stale and enqueues recomputation in
the same transaction, so a committed schedule never coexists with scores
that claim to be fresh.
"""

import logging
from datetime import date, timedelta
from typing import Any, List, Optional

from core.matching.engine import MatchEngine
from core.matching.staleness import StalenessTracker
from database.models import ScheduleEntry, SportSeason
from database.uow import Repositories
from ..models.requests import ScheduleCreate
from ..models.responses import (
    AvailabilityWindowOut,
    CustomBlockOut,
    ScheduleOut,
    SportSeasonOut,
    TravelConflictOut,
)
from ..utils import safe_date_iso, safe_datetime_iso, safe_float, safe_id
from ..exceptions import (
    InvalidDateRangeException,
    ScheduleNotFoundException,
    SportSeasonNotFoundException,
    StudentNotFoundException,
)

logger = logging.getLogger(__name__)

DEFAULT_AVAILABILITY_DAYS = 183
MAX_AVAILABILITY_DAYS = 731


def season_out(season: SportSeason) -> SportSeasonOut:
    return SportSeasonOut(
        id=safe_id(season.id),
        sport_name=season.sport_name,
        season_type=season.season_type,
        start_month=season.start_month,
        end_month=season.end_month,
        practice_hours_per_week=safe_float(season.practice_hours_per_week),
        competition_hours_per_week=safe_float(season.competition_hours_per_week),
        travel_days_per_month=season.travel_days_per_month or 0,
        intensity_level=season.intensity_level,
    )


def schedule_out(entry: ScheduleEntry) -> ScheduleOut:
    return ScheduleOut(
        id=safe_id(entry.id),
        student_id=safe_id(entry.student_id),
        schedule_type=entry.schedule_type,
        sport_season_id=safe_id(entry.sport_season_id),
        sport_season=season_out(entry.sport_season) if entry.sport_season else None,
        custom_blocks=[CustomBlockOut(**b) for b in (entry.custom_blocks or [])],
        available_hours_per_week=safe_float(entry.available_hours_per_week, default=None),
        travel_conflicts=[
            TravelConflictOut(
                start_date=str(t['start_date']),
                end_date=str(t['end_date']),
                reason=t.get('reason'),
            )
            for t in (entry.travel_conflicts or [])
        ],
        effective_start=safe_date_iso(entry.effective_start),
        effective_end=safe_date_iso(entry.effective_end),
        is_active=bool(entry.is_active),
        created_at=safe_datetime_iso(entry.created_at),
    )


class ScheduleService:
    """Service for schedule CRUD and the availability projection."""

    def __init__(self, repos: Repositories, tracker: StalenessTracker, engine: MatchEngine):
        self.repos = repos
        self.tracker = tracker
        self.engine = engine

    def _require_student(self, student_id: Any) -> None:
        if self.repos.profiles.get_student(student_id) is None:
            raise StudentNotFoundException(f"Student {student_id} not found")

    def list_schedules(self, student_id: Any) -> List[ScheduleOut]:
        return [schedule_out(e) for e in self.repos.schedules.list_for_student(student_id)]

    def create_schedule(self, student_id: Any, payload: ScheduleCreate) -> ScheduleOut:
        """
        Persist a schedule entry and invalidate the student's scores.

        Raises:
            StudentNotFoundException: unknown caller.
            SportSeasonNotFoundException: sportSeasonId not in the catalog.
        """
        self._require_student(student_id)
        if payload.sport_season_id is not None:
            if self.repos.schedules.get_sport_season(payload.sport_season_id) is None:
                raise SportSeasonNotFoundException(
                    f"Sport season {payload.sport_season_id} not found"
                )

        entry = self.repos.schedules.create(student_id, payload.to_fields())
        result = schedule_out(entry)
        self.tracker.schedule_changed(self.repos, student_id)
        self.repos.session.commit()
        return result

    def delete_schedule(self, student_id: Any, schedule_id: Any) -> None:
        entry = self.repos.schedules.get_owned(schedule_id, student_id)
        if entry is None:
            raise ScheduleNotFoundException(f"Schedule {schedule_id} not found")

        self.repos.schedules.delete(entry)
        self.tracker.schedule_changed(self.repos, student_id)
        self.repos.session.commit()

    def list_sport_seasons(self) -> List[SportSeasonOut]:
        return [season_out(s) for s in self.repos.schedules.list_sport_seasons()]

    def get_availability(
        self,
        student_id: Any,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> List[AvailabilityWindowOut]:
        """
        Weekly windows between start_date and end_date (inclusive).

        Defaults to today through roughly six months out.

        Raises:
            InvalidDateRangeException: end_date before start_date, or a
                range longer than two years.
        """
        self._require_student(student_id)
        start = start_date or today or date.today()
        end = end_date or start + timedelta(days=DEFAULT_AVAILABILITY_DAYS)
        if end < start:
            raise InvalidDateRangeException(
                f"endDate {end.isoformat()} is before startDate {start.isoformat()}"
            )
        if (end - start).days > MAX_AVAILABILITY_DAYS:
            raise InvalidDateRangeException(
                f"Availability range is limited to {MAX_AVAILABILITY_DAYS} days"
            )

        windows = self.engine.build_windows(self.repos, student_id, start, end)
        return [AvailabilityWindowOut(**w.to_dict()) for w in windows]
