"""
User DAO

Purpose
-------
Thin data-access layer for the `User` ORM entity. Provides:
- Creation with password hashing
- Lookup by id or email, optionally row-locked for credit mutations
- Listing of other members for browsing and swiping
- Profile and skill updates

Design
------
- The DAO expects an active SQLAlchemy `Session` supplied by the caller.
- Business rules (authorization, validation, credit arithmetic) live in the
  services under `bartr.database.core`; the DAO focuses on persistence.
- The DAO never commits; the `@transactional` service owning the session does.

Error Handling
--------------
- Each method logs unexpected exceptions and re-raises them.
"""

import logging
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.crypt.encrypt_decrypt import EncryptionDec
from bartr.database.entities.user import User

logger = logging.getLogger(__name__)


class UserDao:
    """
    Data Access Object (DAO) for managing User entities.
    """

    def createUser(self, session: Session, user_data: User) -> User:
        """
        Create a new user in the database with a hashed password.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_data : User
            User entity whose `password` still holds the plaintext.

        Returns
        -------
        User
            The staged user.
        """
        try:
            enc = EncryptionDec()
            user_data.password = enc.hash_password(text=user_data.password)
            session.add(user_data)
            session.flush()
            return user_data
        except Exception as e:
            logger.error("Error in UserDao.createUser. Error Message: %s", e)
            raise

    def fetchUserById(self, session: Session, user_id: UUID, for_update: bool = False) -> Optional[User]:
        """
        Fetch a user by id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        user_id : UUID
            Id of the user.
        for_update : bool, optional
            Lock the row until the end of the transaction.

        Returns
        -------
        User | None
        """
        try:
            query = session.query(User).filter(User.id == user_id)
            if for_update:
                query = query.with_for_update()
            return query.one_or_none()
        except Exception as e:
            logger.error("Error in UserDao.fetchUserById. Error Message: %s", e)
            raise

    def fetchUsersForUpdate(self, session: Session, user_ids: Iterable[UUID]) -> List[User]:
        """
        Lock several user rows, always in the same (id) order so two
        transactions touching the same pair cannot deadlock.
        """
        try:
            return (
                session.query(User)
                .filter(User.id.in_(list(user_ids)))
                .order_by(User.id)
                .with_for_update()
                .all()
            )
        except Exception as e:
            logger.error("Error in UserDao.fetchUsersForUpdate. Error Message: %s", e)
            raise

    def fetchUserByEmail(self, session: Session, email: str) -> Optional[User]:
        """
        Fetch a user by email.

        Returns
        -------
        User | None
        """
        try:
            return session.query(User).filter(User.email == email.strip().lower()).one_or_none()
        except Exception as e:
            logger.error("Error in UserDao.fetchUserByEmail. Error Message: %s", e)
            raise

    def fetchOtherUsers(self, session: Session, user_id: UUID) -> List[User]:
        """Fetch every user except `user_id`, newest first."""
        try:
            return (
                session.query(User)
                .filter(User.id != user_id)
                .order_by(User.created_on.desc())
                .all()
            )
        except Exception as e:
            logger.error("Error in UserDao.fetchOtherUsers. Error Message: %s", e)
            raise

    def fetchUsersExcluding(self, session: Session, user_ids: Iterable[UUID]) -> List[User]:
        """Fetch every user whose id is not in `user_ids`."""
        try:
            return (
                session.query(User)
                .filter(User.id.notin_(list(user_ids)))
                .order_by(User.created_on.desc())
                .all()
            )
        except Exception as e:
            logger.error("Error in UserDao.fetchUsersExcluding. Error Message: %s", e)
            raise

    def updateProfile(
        self,
        session: Session,
        user: User,
        name: str,
        bio: Optional[str],
        location: Optional[str],
        timezone: Optional[str],
        skills_offered: List[str],
        skills_needed: List[str],
    ) -> User:
        """Overwrite the profile fields of `user`."""
        try:
            user.user_name = name
            user.bio = bio
            user.location = location
            user.timezone = timezone
            user.skills_offered = list(skills_offered)
            user.skills_needed = list(skills_needed)
            return user
        except Exception as e:
            logger.error("Error in UserDao.updateProfile. Error Message: %s", e)
            raise

    def updateNeededSkills(self, session: Session, user: User, skills_needed: List[str]) -> User:
        """Overwrite the needed skills of `user`."""
        try:
            user.skills_needed = list(skills_needed)
            return user
        except Exception as e:
            logger.error("Error in UserDao.updateNeededSkills. Error Message: %s", e)
            raise
