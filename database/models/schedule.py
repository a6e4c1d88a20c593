import uuid

from sqlalchemy import Column, Text, Integer, Float, Boolean, Date, TIMESTAMP, ForeignKey, Index, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, JSONType


class SportSeason(Base):
    """
    Catalog of sport seasons.

    start_month/end_month are 1-12; a season with start_month > end_month
    wraps across the year end (e.g. basketball Nov-Mar).
    """
    __tablename__ = 'sport_season'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sport_name = Column(Text, nullable=False)
    season_type = Column(Text, nullable=False)  # e.g. "in-season", "off-season"
    start_month = Column(Integer, nullable=False)
    end_month = Column(Integer, nullable=False)
    practice_hours_per_week = Column(Float, nullable=False, default=0)
    competition_hours_per_week = Column(Float, nullable=False, default=0)
    travel_days_per_month = Column(Integer, nullable=False, default=0)
    intensity_level = Column(Integer, nullable=False, default=3)  # 1-5

    __table_args__ = (
        UniqueConstraint('sport_name', 'season_type', name='uq_sport_season_name_type'),
    )


class ScheduleEntry(Base):
    """
    One of a student's schedule commitments.

    Entries are additive: every active entry overlapping a week contributes
    committed hours to that week.
    """
    __tablename__ = 'student_schedules'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    schedule_type = Column(Text, nullable=False)  # sport|custom|work
    sport_season_id = Column(Uuid, ForeignKey('sport_season.id', ondelete='SET NULL'), nullable=True)

    # [{day, start_time, end_time, label}]
    custom_blocks = Column(JSONType, nullable=False, default=list)
    available_hours_per_week = Column(Float)
    # [{start_date, end_date, reason}]
    travel_conflicts = Column(JSONType, nullable=False, default=list)

    effective_start = Column(Date)
    effective_end = Column(Date)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    student = relationship("Student", back_populates="schedules")
    sport_season = relationship("SportSeason")

    __table_args__ = (
        Index('idx_student_schedules_student', 'student_id'),
    )
