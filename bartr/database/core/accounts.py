"""
Service-layer operations for accounts, profiles and discovery.

All functions are wrapped with the `@transactional` decorator, which manages
SQLAlchemy sessions and transactions automatically. Each function accepts (and
uses) an injected `session: Session` provided by the decorator.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api.errors import AuthenticationRequired, AuthorizationError, NotFound, ValidationFailed
from bartr.crypt.encrypt_decrypt import EncryptionDec
from bartr.database.core.serializers import own_profile, public_profile
from bartr.database.daos.swipe_dao import SwipeDao
from bartr.database.daos.user_dao import UserDao
from bartr.database.entities.user import User
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def _clean_skills(skills: Optional[List[str]]) -> List[str]:
    """Strip labels, drop blanks and case-insensitive duplicates, keep order."""
    cleaned, seen = [], set()
    for skill in skills or []:
        label = skill.strip()
        if label and label.lower() not in seen:
            seen.add(label.lower())
            cleaned.append(label)
    return cleaned


@transactional
def register_user(session: Session, name: str, email: str, password: str) -> dict:
    """
    Create a new member with an empty profile and a zero balance.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session (injected by @transactional).
    name : str
        Display name.
    email : str
        Login email (must be unique).
    password : str
        Plaintext password, validated and then hashed at DAO level.

    Returns
    -------
    dict
        The member's own profile.

    Raises
    ------
    ValidationFailed
        Email already registered, or password too weak.
    """
    user_dao = UserDao()
    enc = EncryptionDec()
    email = email.strip().lower()
    if user_dao.fetchUserByEmail(session, email) is not None:
        raise ValidationFailed("Email already registered")
    if not enc.is_valid_password(password):
        raise ValidationFailed("Password is invalid. Must be at least 8 characters with letters and digits.")
    user = user_dao.createUser(session, User(user_name=name.strip(), email=email, password=password))
    logger.info("Registered user %s", user.id)
    return own_profile(user)


@transactional
def login_user(session: Session, email: str, password: str) -> dict:
    """
    Authenticate a member by email and password.

    Returns
    -------
    dict
        The member's own profile.

    Raises
    ------
    AuthenticationRequired
        Unknown email or wrong password.
    """
    user = UserDao().fetchUserByEmail(session, email)
    if user is None or not EncryptionDec().check_passwords(password, user.password):
        raise AuthenticationRequired("Incorrect email or password")
    return own_profile(user)


@transactional
def get_profile(session: Session, user_id: UUID) -> dict:
    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return own_profile(user)


@transactional
def save_profile(
    session: Session,
    actor_id: UUID,
    user_id: UUID,
    name: str,
    bio: Optional[str],
    location: Optional[str],
    timezone: Optional[str],
    offered_skills: Optional[List[str]],
    needed_skills: Optional[List[str]],
) -> dict:
    """
    Overwrite the actor's profile and skills.

    Raises
    ------
    AuthorizationError
        `user_id` is not the authenticated actor.
    ValidationFailed
        Missing name.
    """
    if user_id != actor_id:
        logger.warning("Auth mismatch: user %s tried to update profile for %s", actor_id, user_id)
        raise AuthorizationError("Forbidden: You can only update your own profile.")
    if not name or not name.strip():
        raise ValidationFailed("Missing required fields (userId, name)")
    user_dao = UserDao()
    user = user_dao.fetchUserById(session, actor_id)
    if user is None:
        raise NotFound("User not found")
    user_dao.updateProfile(
        session,
        user,
        name=name.strip(),
        bio=bio,
        location=location,
        timezone=timezone,
        skills_offered=_clean_skills(offered_skills),
        skills_needed=_clean_skills(needed_skills),
    )
    logger.info("Profile updated for user %s", actor_id)
    return own_profile(user)


@transactional
def save_needed_skills(session: Session, actor_id: UUID, skills_needed: List[str]) -> dict:
    user_dao = UserDao()
    user = user_dao.fetchUserById(session, actor_id)
    if user is None:
        raise NotFound("User not found")
    user_dao.updateNeededSkills(session, user, _clean_skills(skills_needed))
    return own_profile(user)


@transactional
def browse_users(session: Session, actor_id: UUID) -> list[dict]:
    """Every other member with their offered and needed skills."""
    return [public_profile(user) for user in UserDao().fetchOtherUsers(session, actor_id)]


@transactional
def skill_match_inputs(session: Session, actor_id: UUID) -> dict:
    """
    What AI matching works from: the actor's needed skills and every other
    member offering at least one skill.
    """
    user_dao = UserDao()
    actor = user_dao.fetchUserById(session, actor_id)
    if actor is None:
        raise NotFound("User not found")
    providers = [
        public_profile(user) for user in user_dao.fetchOtherUsers(session, actor_id) if user.skills_offered
    ]
    return {"skillsNeeded": list(actor.skills_needed or []), "providers": providers}


@transactional
def swipe_candidates(session: Session, actor_id: UUID) -> list[dict]:
    """
    Members the actor has not swiped on yet (in either direction).
    """
    excluded = set(SwipeDao().fetchSwipedUserIds(session, actor_id))
    excluded.add(actor_id)
    return [public_profile(user) for user in UserDao().fetchUsersExcluding(session, excluded)]
