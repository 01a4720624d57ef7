"""Database operations for user profiles."""

import uuid as uuid_module

from sqlalchemy.orm import Session

from src.database.profiles.models import Profile


def get_profile_by_user_id(
    session: Session,
    user_id: uuid_module.UUID,
) -> Profile | None:
    """Get a user's profile.

    :param session: Database session.
    :param user_id: User ID.
    :returns: The profile or None if the user has none.
    """
    return session.query(Profile).filter(Profile.user_id == user_id).first()
