from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from trustbadges.models import Base


class Badge(Base):
    """An individually catalogued badge, managed separately from group settings."""

    __tablename__ = "trust_badges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    settings = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
