import uuid

from sqlalchemy import Column, Text, Float, Date, TIMESTAMP, ForeignKey, Index, Uuid, func
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base, JSONType


class Listing(Base):
    """
    A project/role listing posted by a tenant.

    visibility:
    - tenant: only the owning tenant's students
    - network: also students of tenants sharing a partner network
    - private: invitation only (never enqueued cross-tenant)
    """
    __tablename__ = 'listing'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey('tenant.id', ondelete='CASCADE'), nullable=True)
    title = Column(Text, nullable=False)
    skills_required = Column(JSONType, nullable=False, default=list)
    hours_per_week = Column(Float)
    start_date = Column(Date)
    end_date = Column(Date)
    status = Column(Text, nullable=False, default='open')  # draft|open|closed
    visibility = Column(Text, nullable=False, default='tenant')
    owner_alumni_institution = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    tenant = relationship("Tenant")

    __table_args__ = (
        Index('idx_listing_tenant', 'tenant_id'),
        Index('idx_listing_status', 'status'),
    )
