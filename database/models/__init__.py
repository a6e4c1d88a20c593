from .base import Base, JSONType
from .tenant import Tenant
from .student import Student, StudentSkill, Engagement
from .listing import Listing
from .schedule import SportSeason, ScheduleEntry
from .match import MatchScore, MatchScoreHistory
from .recompute import RecomputeQueueItem, PENDING_PREDICATE
from .settings import AppSettings, WEIGHTS_FINGERPRINT_KEY

__all__ = [
    'Base',
    'JSONType',
    'Tenant',
    'Student',
    'StudentSkill',
    'Engagement',
    'Listing',
    'SportSeason',
    'ScheduleEntry',
    'MatchScore',
    'MatchScoreHistory',
    'RecomputeQueueItem',
    'PENDING_PREDICATE',
    'AppSettings',
    'WEIGHTS_FINGERPRINT_KEY',
]
