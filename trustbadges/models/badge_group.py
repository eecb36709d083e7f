"""BadgeGroup model: one row per group, settings kept as a JSON blob."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from trustbadges.models import Base


class BadgeGroup(Base):
    __tablename__ = "trust_badge_groups"

    # Surrogate key; gives groups a stable insertion order
    pk = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String(64), unique=True, index=True, nullable=False)
    group_name = Column(String(255), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    required_plugin = Column(String(32), nullable=True)
    settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
