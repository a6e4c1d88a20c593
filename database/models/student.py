import uuid

from sqlalchemy import Column, Text, Integer, Float, TIMESTAMP, ForeignKey, Index, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, JSONType


class Student(Base):
    """
    Student profile, owned by the profile subsystem and read here.

    interests is NULL when the student never declared any; an empty list
    means they declared none explicitly.
    """
    __tablename__ = 'student'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey('tenant.id', ondelete='CASCADE'), nullable=True)
    first_name = Column(Text, nullable=False, default='')
    last_name = Column(Text, nullable=False, default='')
    email = Column(Text, nullable=False, default='')
    university = Column(Text)
    interests = Column(JSONType, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    tenant = relationship("Tenant")
    skills = relationship("StudentSkill", back_populates="student", cascade="all, delete-orphan")
    engagements = relationship("Engagement", back_populates="student", cascade="all, delete-orphan")
    schedules = relationship("ScheduleEntry", back_populates="student", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_student_tenant', 'tenant_id'),
    )


class StudentSkill(Base):
    __tablename__ = 'student_skill'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    category = Column(Text, nullable=False, default='General')
    proficiency_level = Column(Integer, nullable=False, default=3)  # 1-5

    student = relationship("Student", back_populates="skills")

    __table_args__ = (
        Index('idx_student_skill_student', 'student_id'),
    )


class Engagement(Base):
    """
    Application / engagement history between a student and a listing.

    Status lifecycle: applied -> accepted -> completed, with withdrawn and
    dropped as terminal exits.
    """
    __tablename__ = 'engagement'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    listing_id = Column(Uuid, ForeignKey('listing.id', ondelete='CASCADE'), nullable=False)
    status = Column(Text, nullable=False, default='applied')
    hours_per_week = Column(Float)
    rating = Column(Float)  # 1-5, set by the listing owner
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    student = relationship("Student", back_populates="engagements")

    __table_args__ = (
        Index('idx_engagement_student', 'student_id'),
        Index('idx_engagement_listing', 'listing_id'),
    )
