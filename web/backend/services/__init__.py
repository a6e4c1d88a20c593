"""Business logic services."""

from .change_service import ChangeNotificationService
from .match_service import MatchService
from .schedule_service import ScheduleService
