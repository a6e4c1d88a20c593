import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, Index, Uuid, func
from sqlalchemy.sql import text as sql_text

from core.utils import utcnow
from .base import Base

PENDING_PREDICATE = "status = 'pending'"


class RecomputeQueueItem(Base):
    """
    Durable work item asking for a (student, listing) score to be recomputed.

    Lifecycle: pending -> processing -> done. A failed attempt goes back to
    pending with available_at pushed out (exponential backoff) until
    max_attempts, then failed. Items for deleted students/listings are
    cancelled. At most one pending item exists per pair.
    """
    __tablename__ = 'recompute_queue'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid, nullable=False)
    listing_id = Column(Uuid, nullable=False)
    tenant_id = Column(Uuid, nullable=True)

    priority = Column(Integer, nullable=False, default=1)
    reason = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default='pending')

    enqueued_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    available_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    claimed_by = Column(Text)
    claimed_at = Column(TIMESTAMP(timezone=True))
    lease_expires_at = Column(TIMESTAMP(timezone=True))

    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)
    processed_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        Index(
            'uq_recompute_queue_pending_pair', 'student_id', 'listing_id',
            unique=True,
            postgresql_where=sql_text(PENDING_PREDICATE),
            sqlite_where=sql_text(PENDING_PREDICATE),
        ),
        Index('idx_recompute_queue_claim', 'status', 'priority', 'enqueued_at'),
        Index('idx_recompute_queue_tenant', 'tenant_id'),
    )
