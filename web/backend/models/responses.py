#!/usr/bin/env python3
"""
Response models for API endpoints.

Serialized in camelCase (field aliases) to match the consuming frontend.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Dict, Any


class CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingMatch(CamelResponse):
    """A ranked student match for one listing."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "studentId": "550e8400-e29b-41d4-a716-446655440000",
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.edu",
                "university": "Holy Cross",
                "compositeScore": 82,
                "matchedSkills": ["Python", "SQL"],
                "missingSkills": ["React"],
                "signals": {"skills": {"score": 0.6667, "weight": 0.3, "fallback": False, "details": {}}},
                "isStale": False,
                "computedAt": "2026-02-01T12:00:00+00:00"
            }
        }
    )

    student_id: str
    first_name: str
    last_name: str
    email: str
    university: Optional[str] = None
    composite_score: int = Field(ge=0, le=100)
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    signals: Dict[str, Any] = Field(default_factory=dict)
    is_stale: bool = False
    computed_at: Optional[str] = None


class StudentMatch(CamelResponse):
    """A ranked listing match for one student."""
    listing_id: str
    title: str
    tenant_id: Optional[str] = None
    hours_per_week: Optional[float] = None
    composite_score: int = Field(ge=0, le=100)
    matched_skills: List[str] = Field(default_factory=list)
    missing_skills: List[str] = Field(default_factory=list)
    signals: Dict[str, Any] = Field(default_factory=dict)
    is_stale: bool = False
    computed_at: Optional[str] = None


class ScoreStats(BaseModel):
    """Score cache statistics (snake_case keys)."""
    total_scores: int = Field(ge=0)
    stale_scores: int = Field(ge=0)
    avg_score: float = Field(ge=0, le=100)
    max_score: int = Field(ge=0, le=100)
    min_score: int = Field(ge=0, le=100)
    avg_computation_ms: float = Field(ge=0)
    unique_students: int = Field(ge=0)
    unique_listings: int = Field(ge=0)


class QueueStats(BaseModel):
    pending: int = Field(ge=0)
    processed: int = Field(ge=0)
    failed: int = Field(ge=0)
    total: int = Field(ge=0)


class StatsResponse(BaseModel):
    scores: ScoreStats
    queue: QueueStats


class RecomputeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    scores_marked_stale: int = Field(ge=0, alias="scoresMarkedStale")


class EngineConfigResponse(CamelResponse):
    """Active scoring configuration (read-only)."""
    weights_version: int
    signal_weights: Dict[str, float]
    weights_fingerprint: str
    ttl_hours: int
    neutral_score: float
    base_weekly_capacity: float
    low_threshold: float
    high_threshold: float


class CustomBlockOut(CamelResponse):
    day: str
    start_time: str
    end_time: str
    label: Optional[str] = None


class TravelConflictOut(CamelResponse):
    start_date: str
    end_date: str
    reason: Optional[str] = None


class SportSeasonOut(CamelResponse):
    id: str
    sport_name: str
    season_type: str
    start_month: int = Field(ge=1, le=12)
    end_month: int = Field(ge=1, le=12)
    practice_hours_per_week: float
    competition_hours_per_week: float
    travel_days_per_month: int
    intensity_level: int


class ScheduleOut(CamelResponse):
    id: str
    student_id: str
    schedule_type: str
    sport_season_id: Optional[str] = None
    sport_season: Optional[SportSeasonOut] = None
    custom_blocks: List[CustomBlockOut] = Field(default_factory=list)
    available_hours_per_week: Optional[float] = None
    travel_conflicts: List[TravelConflictOut] = Field(default_factory=list)
    effective_start: Optional[str] = None
    effective_end: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None


class AvailabilityWindowOut(CamelResponse):
    week_start: str
    week_end: str
    available_hours: float = Field(ge=0)
    total_committed_hours: float = Field(ge=0)
    sport_conflicts: List[str] = Field(default_factory=list)
    travel_conflicts: int = Field(ge=0)
    travel_days: int = Field(ge=0, le=7)
    overall_availability: str


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


class ChangeNotificationResponse(CamelResponse):
    """Effect of a profile/listing change or deletion on the score cache."""
    scores_marked_stale: int = Field(default=0, ge=0)
    enqueued: int = Field(default=0, ge=0)
    cancelled: int = Field(default=0, ge=0)
