#!/usr/bin/env python3
"""
Request models for API endpoints.

Payloads use camelCase on the wire; snake_case field names are accepted too.
Validation failures surface as 422 responses.
"""

import re
import uuid
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.matching.availability import WEEKDAYS, parse_time_to_hours

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomBlockIn(CamelModel):
    """A weekly recurring busy block."""
    day: str = Field(..., description="Weekday name, e.g. monday")
    start_time: str = Field(..., description="HH:MM (24h)")
    end_time: str = Field(..., description="HH:MM (24h)")
    label: Optional[str] = None

    @field_validator('day')
    @classmethod
    def _known_day(cls, value: str) -> str:
        day = value.strip().lower()
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {value}")
        return day

    @field_validator('start_time', 'end_time')
    @classmethod
    def _hh_mm(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError(f"Time must be HH:MM, got {value!r}")
        return value

    @model_validator(mode='after')
    def _ordered(self) -> "CustomBlockIn":
        if parse_time_to_hours(self.end_time) <= parse_time_to_hours(self.start_time):
            raise ValueError(f"end_time {self.end_time} must be after start_time {self.start_time}")
        return self


class TravelConflictIn(CamelModel):
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @model_validator(mode='after')
    def _ordered(self) -> "TravelConflictIn":
        if self.end_date < self.start_date:
            raise ValueError("Travel end_date must not be before start_date")
        return self


class ScheduleCreate(CamelModel):
    """Request to create a schedule entry for the calling student."""
    schedule_type: Literal['sport', 'custom', 'work'] = 'sport'
    sport_season_id: Optional[uuid.UUID] = None
    custom_blocks: List[CustomBlockIn] = Field(default_factory=list)
    available_hours_per_week: Optional[float] = Field(None, ge=0, le=168)
    travel_conflicts: List[TravelConflictIn] = Field(default_factory=list)
    effective_start: Optional[date] = None
    effective_end: Optional[date] = None
    is_active: bool = True

    @model_validator(mode='after')
    def _consistent(self) -> "ScheduleCreate":
        if self.schedule_type == 'sport' and self.sport_season_id is None:
            raise ValueError("Sport schedules require sportSeasonId")
        if self.effective_start and self.effective_end and self.effective_end < self.effective_start:
            raise ValueError("effective_end must not be before effective_start")

        by_day = {}
        for block in self.custom_blocks:
            by_day.setdefault(block.day, []).append(
                (parse_time_to_hours(block.start_time), parse_time_to_hours(block.end_time))
            )
        for day, spans in by_day.items():
            spans.sort()
            for (_, prev_end), (next_start, _) in zip(spans, spans[1:]):
                if next_start < prev_end:
                    raise ValueError(f"Overlapping custom blocks on {day}")
        return self

    def to_fields(self) -> dict:
        """Column values for a ScheduleEntry row (JSON-safe block/travel lists)."""
        return {
            'schedule_type': self.schedule_type,
            'sport_season_id': self.sport_season_id,
            'custom_blocks': [b.model_dump() for b in self.custom_blocks],
            'available_hours_per_week': self.available_hours_per_week,
            'travel_conflicts': [t.model_dump(mode='json') for t in self.travel_conflicts],
            'effective_start': self.effective_start,
            'effective_end': self.effective_end,
            'is_active': self.is_active,
        }
