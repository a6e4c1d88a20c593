from database.repositories.base import BaseRepository
from database.repositories.profile import ProfileRepository
from database.repositories.schedule import ScheduleRepository
from database.repositories.match import MatchScoreRepository
from database.repositories.recompute_queue import RecomputeQueueRepository
from database.repositories.settings import SettingsRepository

__all__ = [
    'BaseRepository',
    'ProfileRepository',
    'ScheduleRepository',
    'MatchScoreRepository',
    'RecomputeQueueRepository',
    'SettingsRepository',
]
