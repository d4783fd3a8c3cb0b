"""
ChatMessage ORM Model
=====================

The ``ChatMessage`` ORM model represents a single chat entry within a match.
Messages are immutable once written. A message either carries text only or
also references an uploaded attachment (``file_url`` + ``file_name``).

Key features
~~~~~~~~~~~~
- PostgreSQL-native UUID primary key (``id``)
- Foreign keys to ``matches.id`` and ``app_user.id``
- Timezone-aware ``date_created_on`` timestamp (UTC)
"""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import TEXT, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import Mapped, mapped_column

from bartr.database.config.connection_engine import declarativeBase


class ChatMessage(declarativeBase):
    """
    ORM model for the `message` table.

    Attributes
    ----------
    id : UUID
        Primary key. Unique identifier for the message.
    match_id : UUID
        Foreign key reference to the `matches` table.
    sender_id : UUID
        Foreign key reference to the `app_user` table.
    message_text : str
        Body of the message.
    file_url : str | None
        Location of an attached file.
    file_name : str | None
        Display name of an attached file.
    date_created_on : datetime
        Timestamp when the message was created.
    """

    __tablename__ = "message"

    id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), primary_key=True)
    match_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("matches.id"), nullable=False)
    sender_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    message_text: Mapped[str] = mapped_column(TEXT, nullable=False)
    file_url: Mapped[str] = mapped_column(TEXT, nullable=True)
    file_name: Mapped[str] = mapped_column(TEXT, nullable=True)
    date_created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(
        self,
        match_id: UUID,
        sender_id: UUID,
        message: str,
        file_url: str | None = None,
        file_name: str | None = None,
    ):
        self.id = uuid.uuid4()
        self.match_id = match_id
        self.sender_id = sender_id
        self.message_text = message
        self.file_url = file_url
        self.file_name = file_name
        self.date_created_on = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return (
            f"Match: id:{self.match_id}, "
            f"sender: {self.sender_id}, "
            f"message: {self.message_text}, "
            f"time_created: {self.date_created_on}"
        )
