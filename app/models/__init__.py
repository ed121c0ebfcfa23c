"""Domain records kept by the in-memory stores."""

from app.models.post import Post
from app.models.user import User

__all__ = ["Post", "User"]
