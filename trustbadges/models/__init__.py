from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .user import User as User  # noqa: E402
from .badge_group import BadgeGroup as BadgeGroup  # noqa: E402
from .badge import Badge as Badge  # noqa: E402
