"""Database model and operations for user profiles."""

from src.database.profiles.models import Profile
from src.database.profiles.operations import get_profile_by_user_id

__all__ = [
    "Profile",
    "get_profile_by_user_id",
]
