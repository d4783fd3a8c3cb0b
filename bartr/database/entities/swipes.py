"""
Swipe and PendingRequest ORM Models
===================================

Directional interest between two members.

- ``Swipe`` records one member's like/skip on another. At most one row exists
  per (swiper, swiped user) pair; a repeated swipe overwrites the direction.
- ``PendingRequest`` is an explicit connection proposal that the receiver
  accepts or rejects. Accepted and rejected requests are terminal.
"""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import TEXT, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import Mapped, mapped_column

from bartr.database.config.connection_engine import declarativeBase

SWIPE_DIRECTIONS = ("like", "skip")
REQUEST_STATUSES = ("pending", "accepted", "rejected")


class Swipe(declarativeBase):
    """
    ORM model for the `swipe` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    swiper_id : UUID
        Member who swiped (FK → app_user.id).
    swiped_user_id : UUID
        Member who was swiped on (FK → app_user.id).
    direction : str
        ``"like"`` or ``"skip"``.
    created_on : datetime
        Time of the latest swipe for the pair (UTC).
    """

    __tablename__ = "swipe"
    __table_args__ = (UniqueConstraint("swiper_id", "swiped_user_id", name="uq_swipe_pair"),)

    id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), primary_key=True)
    swiper_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    swiped_user_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    direction: Mapped[str] = mapped_column(TEXT, nullable=False)
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(self, swiper_id: UUID, swiped_user_id: UUID, direction: str):
        self.id = uuid.uuid4()
        self.swiper_id = swiper_id
        self.swiped_user_id = swiped_user_id
        self.direction = direction
        self.created_on = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"Swipe: {self.swiper_id} {self.direction}s {self.swiped_user_id}"


class PendingRequest(declarativeBase):
    """
    ORM model for the `pending_request` table.

    Attributes
    ----------
    id : UUID
        Primary key.
    sender_id : UUID
        Member proposing the connection.
    receiver_id : UUID
        Member asked to accept or reject.
    status : str
        One of ``pending``, ``accepted``, ``rejected``.
    created_on : datetime
        Creation timestamp (UTC).
    """

    __tablename__ = "pending_request"

    id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), primary_key=True)
    sender_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    receiver_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    status: Mapped[str] = mapped_column(TEXT, nullable=False, default="pending")
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(self, sender_id: UUID, receiver_id: UUID):
        self.id = uuid.uuid4()
        self.sender_id = sender_id
        self.receiver_id = receiver_id
        self.status = "pending"
        self.created_on = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"PendingRequest: {self.sender_id} -> {self.receiver_id} ({self.status})"
