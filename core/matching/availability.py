#!/usr/bin/env python3
"""
Availability Window Builder

Projects a student's schedule entries onto ISO weeks (Monday-Sunday) and
reports how many hours remain for a listing in each week.

Key behavior:
- Multiple active entries are additive; no entry "wins".
- Sport seasons apply when the week's month (month of its Thursday) falls in
  [start_month, end_month], with year-wrapping seasons compared circularly.
- Custom/work entries either commit the hours implied by their weekly blocks
  or, when an explicit weekly availability override is set, commit
  capacity - override.
- Explicit travel conflicts count once per overlapping range and commit
  travel_hours_per_day for every distinct travel day inside the week.
- Deterministic: the same schedules and range always produce the same windows.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from core.config_loader import AvailabilityConfig
from core.matching.models import (
    AvailabilityLevel,
    AvailabilityWindow,
    CustomBlock,
    ScheduleData,
    SportSeasonData,
)
from core.utils import clamp, round_half_up, week_start_of

logger = logging.getLogger(__name__)

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')
DAYS_PER_WEEK = 7


def parse_time_to_hours(value: str) -> float:
    """Convert an HH:MM string to fractional hours."""
    hours, _, minutes = value.partition(':')
    return int(hours) + int(minutes or 0) / 60.0


def block_hours(block: CustomBlock) -> float:
    hours = parse_time_to_hours(block.end_time) - parse_time_to_hours(block.start_time)
    return hours if hours > 0 else 0.0


def is_month_in_season(month: int, start_month: int, end_month: int) -> bool:
    if start_month <= end_month:
        return start_month <= month <= end_month
    # Season wraps across year end, e.g. Nov-Feb
    return month >= start_month or month <= end_month


def _intersect(
    a_start: date, a_end: date, b_start: Optional[date], b_end: Optional[date]
) -> Optional[Tuple[date, date]]:
    lo = max(a_start, b_start) if b_start else a_start
    hi = min(a_end, b_end) if b_end else a_end
    if lo > hi:
        return None
    return lo, hi


def _iter_days(start: date, end: date) -> Iterable[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def _prorated_travel_count(season: SportSeasonData, week_start: date) -> int:
    if not season.travel_days_per_month:
        return 0
    anchor = week_start + timedelta(days=3)
    days_in_month = calendar.monthrange(anchor.year, anchor.month)[1]
    return round_half_up(season.travel_days_per_month * DAYS_PER_WEEK / days_in_month)


def classify_availability(
    available_hours: float, travel_days: int, config: AvailabilityConfig
) -> AvailabilityLevel:
    if available_hours <= 0 or travel_days >= DAYS_PER_WEEK:
        return AvailabilityLevel.NONE
    if available_hours < config.low_threshold:
        return AvailabilityLevel.LOW
    if available_hours < config.high_threshold:
        return AvailabilityLevel.MEDIUM
    return AvailabilityLevel.HIGH


def build_week(
    schedules: List[ScheduleData], week_start: date, config: AvailabilityConfig
) -> AvailabilityWindow:
    """Compute a single ISO week's window from the given schedule entries."""
    week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)
    # ISO week month is decided by its Thursday
    week_month = (week_start + timedelta(days=3)).month
    capacity = config.base_weekly_capacity

    committed = 0.0
    sport_conflicts: List[str] = []
    travel_count = 0
    travel_days: Set[date] = set()

    for entry in schedules:
        if not entry.is_active:
            continue
        overlap = _intersect(week_start, week_end, entry.effective_start, entry.effective_end)
        if overlap is None:
            continue

        if entry.schedule_type == 'sport':
            season = entry.sport_season
            if season is None:
                logger.warning(f"Sport schedule {entry.id} has no season; ignoring")
            elif is_month_in_season(week_month, season.start_month, season.end_month):
                committed += season.weekly_hours
                sport_conflicts.append(season.label)
                travel_count += _prorated_travel_count(season, week_start)
        elif entry.available_hours_per_week is not None:
            committed += max(0.0, capacity - entry.available_hours_per_week)
        else:
            lo, hi = overlap
            active_weekdays = {day.weekday() for day in _iter_days(lo, hi)}
            for block in entry.custom_blocks:
                day_name = (block.day or '').lower()
                if day_name in WEEKDAYS and WEEKDAYS.index(day_name) in active_weekdays:
                    committed += block_hours(block)

        for conflict in entry.travel_conflicts:
            span = _intersect(week_start, week_end, conflict.start_date, conflict.end_date)
            if span is None:
                continue
            travel_count += 1
            travel_days.update(_iter_days(*span))

    committed += len(travel_days) * config.travel_hours_per_day
    available = round(clamp(capacity - committed, 0.0, capacity), 1)

    return AvailabilityWindow(
        week_start=week_start,
        week_end=week_end,
        available_hours=available,
        total_committed_hours=round(committed, 1),
        sport_conflicts=sport_conflicts,
        travel_conflicts=travel_count,
        travel_days=len(travel_days),
        overall_availability=classify_availability(available, len(travel_days), config),
    )


def build_availability_windows(
    schedules: List[ScheduleData],
    start: date,
    end: date,
    config: Optional[AvailabilityConfig] = None,
) -> List[AvailabilityWindow]:
    """
    Build ordered, non-overlapping weekly windows covering [start, end].

    The first window starts on the Monday on or before ``start`` and the
    last one ends on the Sunday on or after ``end``.

    Raises:
        ValueError: if end is before start.
    """
    if end < start:
        raise ValueError(f"end ({end}) must not be before start ({start})")
    config = config or AvailabilityConfig()

    windows = []
    week = week_start_of(start)
    while week <= end:
        windows.append(build_week(schedules, week, config))
        week += timedelta(days=DAYS_PER_WEEK)
    return windows
