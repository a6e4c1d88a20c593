#!/usr/bin/env python3
"""
Unit tests for the weekly availability projection.
"""

import unittest
from datetime import date, timedelta

from core.config_loader import AvailabilityConfig
from core.matching.availability import (
    block_hours,
    build_availability_windows,
    classify_availability,
    is_month_in_season,
    parse_time_to_hours,
)
from core.matching.models import (
    AvailabilityLevel,
    CustomBlock,
    ScheduleData,
    SportSeasonData,
    TravelConflict,
)

# A Monday in September 2026
WEEK = date(2026, 9, 7)


def soccer(start_month=8, end_month=12, travel_days_per_month=0):
    return SportSeasonData(
        sport_name="Soccer",
        season_type="in-season",
        start_month=start_month,
        end_month=end_month,
        practice_hours_per_week=10,
        competition_hours_per_week=5,
        travel_days_per_month=travel_days_per_month,
    )


def one_week(schedules, week_start=WEEK):
    windows = build_availability_windows(schedules, week_start, week_start + timedelta(days=6))
    assert len(windows) == 1
    return windows[0]


class TestTimeHelpers(unittest.TestCase):

    def test_parse_time_to_hours(self):
        self.assertEqual(parse_time_to_hours("09:00"), 9.0)
        self.assertEqual(parse_time_to_hours("13:30"), 13.5)

    def test_block_hours(self):
        self.assertEqual(block_hours(CustomBlock(day="monday", start_time="09:00", end_time="12:00")), 3.0)
        self.assertEqual(block_hours(CustomBlock(day="monday", start_time="12:00", end_time="09:00")), 0.0)

    def test_month_in_season_wraps_year_end(self):
        self.assertTrue(is_month_in_season(9, 8, 12))
        self.assertFalse(is_month_in_season(1, 8, 12))
        self.assertTrue(is_month_in_season(1, 11, 2))
        self.assertTrue(is_month_in_season(12, 11, 2))
        self.assertFalse(is_month_in_season(6, 11, 2))

    def test_classify_thresholds(self):
        config = AvailabilityConfig()
        self.assertEqual(classify_availability(30, 0, config), AvailabilityLevel.HIGH)
        self.assertEqual(classify_availability(29.9, 0, config), AvailabilityLevel.MEDIUM)
        self.assertEqual(classify_availability(15, 0, config), AvailabilityLevel.MEDIUM)
        self.assertEqual(classify_availability(14.9, 0, config), AvailabilityLevel.LOW)
        self.assertEqual(classify_availability(0, 0, config), AvailabilityLevel.NONE)
        self.assertEqual(classify_availability(40, 7, config), AvailabilityLevel.NONE)


class TestBuildAvailabilityWindows(unittest.TestCase):

    def test_no_schedules_is_full_capacity(self):
        window = one_week([])
        self.assertEqual(window.available_hours, 40.0)
        self.assertEqual(window.total_committed_hours, 0.0)
        self.assertEqual(window.overall_availability, AvailabilityLevel.HIGH)

    def test_in_season_sport_commits_practice_and_competition(self):
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer())
        window = one_week([entry])

        self.assertEqual(window.available_hours, 25.0)
        self.assertEqual(window.total_committed_hours, 15.0)
        self.assertEqual(window.overall_availability, AvailabilityLevel.MEDIUM)
        self.assertEqual(window.sport_conflicts, ["Soccer in-season"])

    def test_off_season_sport_commits_nothing(self):
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer())
        window = one_week([entry], week_start=date(2027, 1, 4))

        self.assertEqual(window.available_hours, 40.0)
        self.assertEqual(window.sport_conflicts, [])

    def test_week_month_is_month_of_thursday(self):
        # Mon 2026-08-31 .. Sun 2026-09-06; Thursday falls in September
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer(start_month=1, end_month=8))
        window = one_week([entry], week_start=date(2026, 8, 31))
        self.assertEqual(window.available_hours, 40.0)

    def test_wrapping_season_applies_in_january(self):
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer(start_month=11, end_month=2))
        window = one_week([entry], week_start=date(2027, 1, 4))
        self.assertEqual(window.available_hours, 25.0)

    def test_season_travel_days_are_prorated_into_conflict_count(self):
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer(travel_days_per_month=4))
        window = one_week([entry])
        # 4 * 7 / 30 rounds to 1
        self.assertEqual(window.travel_conflicts, 1)
        self.assertEqual(window.travel_days, 0)
        self.assertEqual(window.available_hours, 25.0)

    def test_custom_blocks_are_summed(self):
        entry = ScheduleData(id=1, schedule_type="custom", custom_blocks=[
            CustomBlock(day="monday", start_time="09:00", end_time="12:00"),
            CustomBlock(day="wednesday", start_time="13:30", end_time="15:00"),
        ])
        window = one_week([entry])
        self.assertEqual(window.total_committed_hours, 4.5)
        self.assertEqual(window.available_hours, 35.5)

    def test_custom_blocks_respect_effective_range(self):
        entry = ScheduleData(
            id=1,
            schedule_type="work",
            custom_blocks=[
                CustomBlock(day="monday", start_time="09:00", end_time="12:00"),
                CustomBlock(day="wednesday", start_time="13:30", end_time="15:00"),
            ],
            effective_start=date(2026, 9, 9),
        )
        window = one_week([entry])
        self.assertEqual(window.total_committed_hours, 1.5)

    def test_override_commits_capacity_minus_override(self):
        entry = ScheduleData(id=1, schedule_type="custom", available_hours_per_week=12)
        window = one_week([entry])
        self.assertEqual(window.available_hours, 12.0)
        self.assertEqual(window.overall_availability, AvailabilityLevel.LOW)

    def test_entries_are_additive(self):
        entries = [
            ScheduleData(id=1, schedule_type="sport", sport_season=soccer()),
            ScheduleData(id=2, schedule_type="work", custom_blocks=[
                CustomBlock(day="friday", start_time="10:00", end_time="16:00"),
            ]),
        ]
        window = one_week(entries)
        self.assertEqual(window.available_hours, 19.0)

    def test_inactive_entries_are_ignored(self):
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer(), is_active=False)
        self.assertEqual(one_week([entry]).available_hours, 40.0)

    def test_travel_days_commit_hours(self):
        entry = ScheduleData(id=1, schedule_type="custom", travel_conflicts=[
            TravelConflict(start_date=date(2026, 9, 10), end_date=date(2026, 9, 12)),
        ])
        window = one_week([entry])
        self.assertEqual(window.travel_conflicts, 1)
        self.assertEqual(window.travel_days, 3)
        self.assertEqual(window.available_hours, 16.0)

    def test_travel_spanning_two_weeks_counts_in_both(self):
        entry = ScheduleData(id=1, schedule_type="custom", travel_conflicts=[
            TravelConflict(start_date=date(2026, 9, 12), end_date=date(2026, 9, 15)),
        ])
        windows = build_availability_windows([entry], WEEK, date(2026, 9, 20))
        self.assertEqual([w.travel_days for w in windows], [2, 2])
        self.assertEqual([w.travel_conflicts for w in windows], [1, 1])

    def test_full_week_travel_has_no_availability(self):
        entry = ScheduleData(id=1, schedule_type="custom", travel_conflicts=[
            TravelConflict(start_date=WEEK, end_date=WEEK + timedelta(days=6)),
        ])
        window = one_week([entry])
        self.assertEqual(window.available_hours, 0.0)
        self.assertEqual(window.overall_availability, AvailabilityLevel.NONE)

    def test_windows_are_contiguous_monday_to_sunday(self):
        windows = build_availability_windows([], date(2026, 9, 9), date(2026, 9, 30))

        self.assertEqual(windows[0].week_start, WEEK)
        self.assertEqual(len(windows), 4)
        for prev, nxt in zip(windows, windows[1:]):
            self.assertEqual(nxt.week_start, prev.week_end + timedelta(days=1))
        for window in windows:
            self.assertEqual(window.week_start.weekday(), 0)
            self.assertEqual(window.week_end.weekday(), 6)

    def test_available_hours_stay_within_capacity(self):
        entries = [
            ScheduleData(id=i, schedule_type="sport", sport_season=soccer()) for i in range(5)
        ]
        window = one_week(entries)
        self.assertEqual(window.available_hours, 0.0)
        self.assertGreater(window.total_committed_hours, 40.0)

    def test_inverted_range_raises(self):
        with self.assertRaises(ValueError):
            build_availability_windows([], date(2026, 9, 30), date(2026, 9, 1))

    def test_deterministic(self):
        entry = ScheduleData(id=1, schedule_type="sport", sport_season=soccer(travel_days_per_month=3))
        first = build_availability_windows([entry], WEEK, date(2026, 12, 31))
        second = build_availability_windows([entry], WEEK, date(2026, 12, 31))
        self.assertEqual(first, second)


if __name__ == '__main__':
    unittest.main()
