"""Data transfer objects for the match engine.

Plain dataclasses detached from the ORM session. Signal evaluators and the
availability builder only ever see these, never ORM rows, so they stay pure
and can be exercised without a database.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class SignalName(str, Enum):
    """The closed set of scoring signals, in evaluation order."""
    SKILLS = "skills"
    TEMPORAL = "temporal"
    SUSTAINABILITY = "sustainability"
    GROWTH = "growth"
    TRUST = "trust"
    NETWORK = "network"


class AvailabilityLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass
class SkillEntry:
    name: str
    category: str = "General"
    proficiency_level: int = 3


@dataclass
class EngagementRecord:
    """One application/engagement from the student's history."""
    listing_id: Any
    status: str  # applied|accepted|completed|withdrawn|dropped
    hours_per_week: Optional[float] = None
    rating: Optional[float] = None


@dataclass
class StudentProfile:
    id: Any
    tenant_id: Any = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    university: Optional[str] = None
    skills: List[SkillEntry] = field(default_factory=list)
    # None means "not declared" / "not available", distinct from empty
    interests: Optional[List[str]] = None
    engagements: Optional[List[EngagementRecord]] = None
    network_ids: List[str] = field(default_factory=list)


@dataclass
class ListingProfile:
    id: Any
    tenant_id: Any = None
    title: str = ""
    skills_required: List[str] = field(default_factory=list)
    hours_per_week: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = "open"
    visibility: str = "tenant"  # tenant|network|private
    network_ids: List[str] = field(default_factory=list)
    owner_alumni_institution: Optional[str] = None


@dataclass
class SportSeasonData:
    sport_name: str
    season_type: str
    start_month: int
    end_month: int
    practice_hours_per_week: float = 0.0
    competition_hours_per_week: float = 0.0
    travel_days_per_month: int = 0
    intensity_level: int = 3

    @property
    def label(self) -> str:
        return f"{self.sport_name} {self.season_type}"

    @property
    def weekly_hours(self) -> float:
        return (self.practice_hours_per_week or 0.0) + (self.competition_hours_per_week or 0.0)


@dataclass
class CustomBlock:
    day: str
    start_time: str  # HH:MM
    end_time: str
    label: Optional[str] = None


@dataclass
class TravelConflict:
    start_date: date
    end_date: date
    reason: Optional[str] = None


@dataclass
class ScheduleData:
    id: Any
    schedule_type: str  # sport|custom|work
    sport_season: Optional[SportSeasonData] = None
    custom_blocks: List[CustomBlock] = field(default_factory=list)
    available_hours_per_week: Optional[float] = None
    travel_conflicts: List[TravelConflict] = field(default_factory=list)
    effective_start: Optional[date] = None
    effective_end: Optional[date] = None
    is_active: bool = True


@dataclass
class AvailabilityWindow:
    week_start: date
    week_end: date
    available_hours: float
    total_committed_hours: float
    sport_conflicts: List[str] = field(default_factory=list)
    travel_conflicts: int = 0
    travel_days: int = 0
    overall_availability: AvailabilityLevel = AvailabilityLevel.HIGH

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['week_start'] = self.week_start.isoformat()
        data['week_end'] = self.week_end.isoformat()
        data['overall_availability'] = self.overall_availability.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailabilityWindow":
        return cls(
            week_start=date.fromisoformat(data['week_start']),
            week_end=date.fromisoformat(data['week_end']),
            available_hours=float(data['available_hours']),
            total_committed_hours=float(data['total_committed_hours']),
            sport_conflicts=list(data.get('sport_conflicts') or []),
            travel_conflicts=int(data.get('travel_conflicts') or 0),
            travel_days=int(data.get('travel_days') or 0),
            overall_availability=AvailabilityLevel(data['overall_availability']),
        )


@dataclass
class SignalResult:
    """Output of one signal evaluator."""
    signal: SignalName
    score: float  # [0, 1]
    details: Dict[str, Any] = field(default_factory=dict)
    fallback: bool = False


@dataclass
class CompositeResult:
    """Composite score plus the breakdown persisted on MatchScore."""
    composite_score: int
    signals: Dict[str, Dict[str, Any]]
    matched_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)
    fallback_signals: List[str] = field(default_factory=list)
    weights_version: int = 1
