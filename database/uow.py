import contextlib
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from database.repositories import (
    MatchScoreRepository,
    ProfileRepository,
    RecomputeQueueRepository,
    ScheduleRepository,
    SettingsRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class Repositories:
    """All repositories bound to one Session."""
    session: Session
    profiles: ProfileRepository
    schedules: ScheduleRepository
    scores: MatchScoreRepository
    queue: RecomputeQueueRepository
    settings: SettingsRepository

    @classmethod
    def for_session(cls, session: Session) -> "Repositories":
        return cls(
            session=session,
            profiles=ProfileRepository(session),
            schedules=ScheduleRepository(session),
            scores=MatchScoreRepository(session),
            queue=RecomputeQueueRepository(session),
            settings=SettingsRepository(session),
        )


@contextlib.contextmanager
def match_uow(session_factory=None):
    """Per-unit-of-work transaction scope.

    Yields a Repositories bundle bound to a fresh Session. Commits on
    success, rolls back on exception, always closes.

    Usage:
        with match_uow() as repos:
            repos.scores.mark_stale_for_student(student_id)
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal
    session = session_factory()
    try:
        yield Repositories.for_session(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
