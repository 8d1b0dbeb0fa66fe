"""SQLAlchemy ORM models.

Models represent database tables:
- members: per-(Slack user, period) received likes/dislikes counters
"""

from app.models.member import Member

__all__ = ["Member"]
