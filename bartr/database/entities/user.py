"""
User ORM Model
==============

The ``User`` ORM model represents a registered marketplace member. It maps to
the ``app_user`` table and carries the authentication credentials, the public
profile shown to other members, and the credit balance.

Key features
~~~~~~~~~~~~
- PostgreSQL-native UUID primary key (``id``)
- Display name, bio, location and timezone strings
- Offered and needed skill labels (JSON arrays)
- Integer credit balance, mutated by top-ups, stakes, refunds and bonuses

"""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import JSON, TEXT, VARCHAR, DateTime, Integer
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import Mapped, mapped_column

from bartr.database.config.connection_engine import declarativeBase


class User(declarativeBase):
    """
    ORM model for the `app_user` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the user.
    user_name : str
        Display name shown to other members.
    email : str
        Unique email address used to log in.
    password : str
        Hashed password of the user.
    bio, location, timezone : str | None
        Free-text profile fields.
    skills_offered : list[str]
        Skill labels the user can teach or perform.
    skills_needed : list[str]
        Skill labels the user is looking for.
    credits : int
        Current credit balance.
    created_on : datetime
        Registration timestamp (UTC).
    """

    __tablename__ = "app_user"

    id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), primary_key=True)
    """Primary key. UUID of the user."""

    user_name: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    """Display name of the user (max length 255)."""

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    """Email address of the user (max length 255, unique)."""

    password: Mapped[str] = mapped_column(TEXT, nullable=False)
    """Hashed password of the user."""

    bio: Mapped[str] = mapped_column(TEXT, nullable=True)
    location: Mapped[str] = mapped_column(TEXT, nullable=True)
    timezone: Mapped[str] = mapped_column(TEXT, nullable=True)

    skills_offered: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    """Offered skill labels."""

    skills_needed: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    """Needed skill labels."""

    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Credit balance. Expected to stay >= 0."""

    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    """Registration timestamp. Defaults to current UTC time."""

    def __init__(self, user_name: str, email: str, password: str, credits: int = 0):
        """
        Initialize a new User object with an empty profile.

        Parameters
        ----------
        user_name : str
            Display name of the user.
        email : str
            Email address of the user.
        password : str
            Password of the user (hashed by the DAO before insert).
        credits : int, optional
            Starting balance. Default is 0.
        """
        self.id = uuid.uuid4()
        self.user_name = user_name
        self.email = email
        self.password = password
        self.credits = credits
        self.skills_offered = []
        self.skills_needed = []
        self.created_on = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"User: id:{self.id}, name: {self.user_name}, credits: {self.credits}"
