import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from core.matching.models import CustomBlock, ScheduleData, SportSeasonData, TravelConflict
from database.models import ScheduleEntry, SportSeason
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def season_to_data(season: SportSeason) -> SportSeasonData:
    return SportSeasonData(
        sport_name=season.sport_name,
        season_type=season.season_type,
        start_month=season.start_month,
        end_month=season.end_month,
        practice_hours_per_week=season.practice_hours_per_week or 0.0,
        competition_hours_per_week=season.competition_hours_per_week or 0.0,
        travel_days_per_month=season.travel_days_per_month or 0,
        intensity_level=season.intensity_level,
    )


def entry_to_data(entry: ScheduleEntry) -> ScheduleData:
    return ScheduleData(
        id=entry.id,
        schedule_type=entry.schedule_type,
        sport_season=season_to_data(entry.sport_season) if entry.sport_season else None,
        custom_blocks=[
            CustomBlock(
                day=b['day'],
                start_time=b['start_time'],
                end_time=b['end_time'],
                label=b.get('label'),
            )
            for b in (entry.custom_blocks or [])
        ],
        available_hours_per_week=entry.available_hours_per_week,
        travel_conflicts=[
            TravelConflict(
                start_date=_as_date(t['start_date']),
                end_date=_as_date(t['end_date']),
                reason=t.get('reason'),
            )
            for t in (entry.travel_conflicts or [])
        ],
        effective_start=entry.effective_start,
        effective_end=entry.effective_end,
        is_active=entry.is_active,
    )


class ScheduleRepository(BaseRepository):
    model = ScheduleEntry

    def list_for_student(self, student_id: Any, active_only: bool = False) -> List[ScheduleEntry]:
        stmt = select(ScheduleEntry).where(
            ScheduleEntry.student_id == student_id
        ).options(selectinload(ScheduleEntry.sport_season))
        if active_only:
            stmt = stmt.where(ScheduleEntry.is_active.is_(True))
        stmt = stmt.order_by(ScheduleEntry.created_at, ScheduleEntry.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_schedule_data(self, student_id: Any) -> List[ScheduleData]:
        """Active entries for a student as detached DTOs."""
        return [entry_to_data(e) for e in self.list_for_student(student_id, active_only=True)]

    def get_owned(self, schedule_id: Any, student_id: Any) -> Optional[ScheduleEntry]:
        stmt = select(ScheduleEntry).where(
            ScheduleEntry.id == schedule_id,
            ScheduleEntry.student_id == student_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, student_id: Any, fields: Dict[str, Any]) -> ScheduleEntry:
        entry = ScheduleEntry(student_id=student_id, **fields)
        self.db.add(entry)
        self.db.flush()
        logger.info(f"Created {entry.schedule_type} schedule {entry.id} for student {student_id}")
        return entry

    def delete(self, entry: ScheduleEntry) -> None:
        logger.info(f"Deleting schedule {entry.id} for student {entry.student_id}")
        self.db.delete(entry)
        self.db.flush()

    def list_sport_seasons(self) -> List[SportSeason]:
        stmt = select(SportSeason).order_by(SportSeason.sport_name, SportSeason.start_month)
        return list(self.db.execute(stmt).scalars().all())

    def get_sport_season(self, season_id: Any) -> Optional[SportSeason]:
        return self.db.get(SportSeason, season_id)
