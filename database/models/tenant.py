import uuid

from sqlalchemy import Column, Text, TIMESTAMP, Uuid, func

from core.utils import utcnow
from .base import Base, JSONType


class Tenant(Base):
    """
    Institution or partner organization owning students and listings.

    network_ids lists the shared partner networks the tenant participates in;
    network-visible listings are offered across tenants sharing a network.
    """
    __tablename__ = 'tenant'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    network_ids = Column(JSONType, nullable=False, default=list)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())
