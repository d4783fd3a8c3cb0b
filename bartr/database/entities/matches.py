"""
Match and Submission ORM Models
===============================

The ``Match`` ORM model is the central record of a bartering engagement
between two members. It maps to the ``matches`` table.

Lifecycle
~~~~~~~~~
``active`` (created, no stakes) → both sides stake → chat enabled →
both sides submit → one side confirms → ``completed``.
A match whose deadline passes with exactly one submission is resolved by the
expiry sweeper and becomes ``expired``.

Invariants
~~~~~~~~~~
- ``user1_id`` < ``user2_id`` comparing the string form of the ids, so a pair
  has exactly one canonical orientation (unique constraint on the pair).
- ``is_chat_enabled`` implies both stake flags are set.
- ``completed`` implies both submission flags are set.

The ``Submission`` model stores each side's delivered work keyed by
(match, user), independent of chat messages.
"""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import TEXT, Boolean, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import Mapped, mapped_column

from bartr.database.config.connection_engine import declarativeBase

MATCH_STATUSES = ("active", "completed", "expired")


def canonical_pair(first: UUID, second: UUID) -> tuple[UUID, UUID]:
    """Order two user ids so the smaller string form comes first."""
    return (first, second) if str(first) < str(second) else (second, first)


class Match(declarativeBase):
    """
    ORM model for the `matches` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    user1_id, user2_id : UUID
        The two members, canonically ordered.
    status : str
        ``active``, ``completed`` or ``expired``.
    created_on : datetime
        Creation timestamp (UTC).
    project_end_date : datetime | None
        Deadline for both submissions.
    stake_status_user1, stake_status_user2 : bool
        Whether each side has staked.
    is_chat_enabled : bool
        Set once both sides have staked.
    project_submitted_user1, project_submitted_user2 : bool
        Whether each side has submitted work.
    stake_amount : int
        Credits each side stakes.
    completed_on : datetime | None
        Settlement or expiry timestamp.
    """

    __tablename__ = "matches"
    __table_args__ = (UniqueConstraint("user1_id", "user2_id", name="uq_match_pair"),)

    id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), primary_key=True)
    user1_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    user2_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    status: Mapped[str] = mapped_column(TEXT, nullable=False, default="active")
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    project_end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    stake_status_user1: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stake_status_user2: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_chat_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    project_submitted_user1: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    project_submitted_user2: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stake_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    def __init__(self, user_a: UUID, user_b: UUID, stake_amount: int, project_end_date: datetime | None):
        """
        Initialize a match in its default state.

        Parameters
        ----------
        user_a, user_b : UUID
            The two members, in any order. They are stored canonically ordered.
        stake_amount : int
            Credits each side has to stake.
        project_end_date : datetime | None
            Submission deadline.
        """
        self.id = uuid.uuid4()
        self.user1_id, self.user2_id = canonical_pair(user_a, user_b)
        self.status = "active"
        self.created_on = datetime.now(timezone.utc)
        self.project_end_date = project_end_date
        self.stake_status_user1 = False
        self.stake_status_user2 = False
        self.is_chat_enabled = False
        self.project_submitted_user1 = False
        self.project_submitted_user2 = False
        self.stake_amount = stake_amount

    def involves(self, user_id: UUID) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def is_user1(self, user_id: UUID) -> bool:
        return self.user1_id == user_id

    def counterpart_of(self, user_id: UUID) -> UUID:
        return self.user2_id if self.is_user1(user_id) else self.user1_id

    def has_staked(self, user_id: UUID) -> bool:
        return self.stake_status_user1 if self.is_user1(user_id) else self.stake_status_user2

    def has_submitted(self, user_id: UUID) -> bool:
        return self.project_submitted_user1 if self.is_user1(user_id) else self.project_submitted_user2

    @property
    def both_staked(self) -> bool:
        return self.stake_status_user1 and self.stake_status_user2

    @property
    def both_submitted(self) -> bool:
        return self.project_submitted_user1 and self.project_submitted_user2

    def __str__(self) -> str:
        return f"Match: id:{self.id}, users: {self.user1_id}/{self.user2_id}, status: {self.status}"


class Submission(declarativeBase):
    """
    ORM model for the `submission` table.
    One row per (match, user); a resubmission replaces the content.
    """

    __tablename__ = "submission"
    __table_args__ = (UniqueConstraint("match_id", "user_id", name="uq_submission_side"),)

    id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), primary_key=True)
    match_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("matches.id"), nullable=False)
    user_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    content: Mapped[str] = mapped_column(TEXT, nullable=False)
    submitted_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(self, match_id: UUID, user_id: UUID, content: str):
        self.id = uuid.uuid4()
        self.match_id = match_id
        self.user_id = user_id
        self.content = content
        self.submitted_on = datetime.now(timezone.utc)
