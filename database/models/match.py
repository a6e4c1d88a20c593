import uuid

from sqlalchemy import Column, Text, Integer, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Index, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, JSONType


class MatchScore(Base):
    """
    Cached composite score for one (student, listing) pair.

    Tracks:
    - Composite score (0-100) and the per-signal breakdown
    - Matched/missing skills for display
    - Staleness: stale rows stay readable until recomputed
    - The weights version the score was computed with
    """
    __tablename__ = 'match_scores'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, ForeignKey('student.id', ondelete='CASCADE'), nullable=False)
    listing_id = Column(Uuid, ForeignKey('listing.id', ondelete='CASCADE'), nullable=False)
    # Listing's tenant, denormalized for tenant-scoped stats
    tenant_id = Column(Uuid, nullable=True)

    composite_score = Column(Integer, nullable=False)
    signals = Column(JSONType, nullable=False, default=dict)
    matched_skills = Column(JSONType, nullable=False, default=list)
    missing_skills = Column(JSONType, nullable=False, default=list)

    is_stale = Column(Boolean, nullable=False, default=False)
    weights_version = Column(Integer, nullable=False, default=1)
    computed_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    computation_ms = Column(Integer, nullable=False, default=0)

    student = relationship("Student")
    listing = relationship("Listing")

    __table_args__ = (
        UniqueConstraint('student_id', 'listing_id', name='uq_match_scores_student_listing'),
        Index('idx_match_scores_listing_score', 'listing_id', 'composite_score'),
        Index('idx_match_scores_student', 'student_id'),
        Index('idx_match_scores_stale', 'is_stale'),
        Index('idx_match_scores_tenant', 'tenant_id'),
        Index('idx_match_scores_computed', 'computed_at'),
    )


class MatchScoreHistory(Base):
    """
    Audit trail of composite changes for a pair.

    A row is written on first computation and whenever a recompute changes
    the composite score.
    """
    __tablename__ = 'match_score_history'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, nullable=False)
    listing_id = Column(Uuid, nullable=False)
    composite_score = Column(Integer, nullable=False)
    previous_score = Column(Integer, nullable=True)
    signals = Column(JSONType, nullable=False, default=dict)
    weights_version = Column(Integer, nullable=False, default=1)
    reason = Column(Text)
    computed_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        Index('idx_match_score_history_pair', 'student_id', 'listing_id'),
    )
