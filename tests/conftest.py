"""
Pytest configuration and fixtures.

Database tests run against an in-memory SQLite database shared through a
StaticPool, so every session (including the ones the worker and the API
open) sees the same data. Commit seeded rows before handing control to
code that opens its own session.
"""

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.utils import utcnow
from database.models import (
    Base,
    Engagement,
    Listing,
    MatchScore,
    ScheduleEntry,
    SportSeason,
    Student,
    StudentSkill,
    Tenant,
)
from database.uow import Repositories


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


class Seeder:
    """Creates collaborator-owned rows (tenants, students, listings) for tests."""

    def __init__(self, session):
        self.session = session

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def tenant(self, name="Holy Cross", network_ids=None) -> Tenant:
        return self._add(Tenant(name=name, network_ids=list(network_ids or [])))

    def student(self, tenant=None, skills=(), interests=None, university=None,
                first_name="Ada", last_name="Lovelace", email=None) -> Student:
        student = Student(
            tenant_id=tenant.id if tenant else None,
            first_name=first_name,
            last_name=last_name,
            email=email or f"{first_name.lower()}@example.edu",
            university=university,
            interests=interests,
        )
        for name in skills:
            student.skills.append(StudentSkill(name=name))
        return self._add(student)

    def engagement(self, student, listing, status="completed", hours_per_week=None, rating=None) -> Engagement:
        return self._add(Engagement(
            student_id=student.id,
            listing_id=listing.id,
            status=status,
            hours_per_week=hours_per_week,
            rating=rating,
        ))

    def listing(self, tenant=None, title="Data Intern", skills_required=(), hours_per_week=None,
                visibility="tenant", status="open", start_date=None, end_date=None) -> Listing:
        return self._add(Listing(
            tenant_id=tenant.id if tenant else None,
            title=title,
            skills_required=list(skills_required),
            hours_per_week=hours_per_week,
            visibility=visibility,
            status=status,
            start_date=start_date,
            end_date=end_date,
        ))

    def season(self, sport_name="Soccer", season_type="in-season", start_month=8, end_month=12,
               practice=10.0, competition=5.0, travel_days_per_month=0) -> SportSeason:
        return self._add(SportSeason(
            sport_name=sport_name,
            season_type=season_type,
            start_month=start_month,
            end_month=end_month,
            practice_hours_per_week=practice,
            competition_hours_per_week=competition,
            travel_days_per_month=travel_days_per_month,
        ))

    def schedule(self, student, schedule_type="sport", season=None, **fields) -> ScheduleEntry:
        return self._add(ScheduleEntry(
            student_id=student.id,
            schedule_type=schedule_type,
            sport_season_id=season.id if season else None,
            **fields
        ))

    def score(self, student, listing, composite=50, is_stale=False, computed_at=None,
              age_hours=None) -> MatchScore:
        if computed_at is None:
            computed_at = utcnow() - timedelta(hours=age_hours or 0)
        return self._add(MatchScore(
            student_id=student.id,
            listing_id=listing.id,
            tenant_id=listing.tenant_id,
            composite_score=composite,
            signals={},
            matched_skills=[],
            missing_skills=[],
            is_stale=is_stale,
            computed_at=computed_at,
            computation_ms=3,
        ))

    def commit(self):
        self.session.commit()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repos(db_session):
    return Repositories.for_session(db_session)


@pytest.fixture
def seed(db_session):
    return Seeder(db_session)
