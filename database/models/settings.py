from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func

from core.utils import utcnow
from .base import Base

WEIGHTS_FINGERPRINT_KEY = 'signal_weights_fingerprint'


class AppSettings(Base):
    """Key/value settings persisted across restarts (e.g. the active weights fingerprint)."""
    __tablename__ = 'app_settings'

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(255), unique=True, nullable=False, index=True)
    value = Column(Text)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)
