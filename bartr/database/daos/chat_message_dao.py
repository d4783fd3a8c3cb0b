"""
Chat Message DAO

Purpose
-------
Data-access layer for the `ChatMessage` ORM entity:
- Message creation
- Retrieval by match (chronological)

Messages are append-only; there is no update or delete operation.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.orm import Session

from bartr.database.entities.messages import ChatMessage

logger = logging.getLogger(__name__)


class ChatMessageDao:
    """
    Data Access Object (DAO) for chat messages.
    """

    def createMessage(self, session: Session, message: ChatMessage) -> ChatMessage:
        """
        Create a new chat message record.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        message : ChatMessage
            Message entity instance to be added.

        Returns
        -------
        ChatMessage
            The message object that was added.
        """
        try:
            session.add(message)
            session.flush()
            return message
        except Exception as e:
            logger.error("Error in ChatMessageDao.createMessage. Error Message: %s", e)
            raise

    def fetchMessagesByMatchId(self, session: Session, match_id: UUID) -> List[ChatMessage]:
        """
        Fetch all messages of a match, ordered by creation time (ascending).
        """
        try:
            return (
                session.query(ChatMessage)
                .filter(ChatMessage.match_id == match_id)
                .order_by(asc(ChatMessage.date_created_on))
                .all()
            )
        except Exception as e:
            logger.error("Error in ChatMessageDao.fetchMessagesByMatchId. Error Message: %s", e)
            raise
