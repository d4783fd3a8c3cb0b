"""
Service-layer operations for match chat.

Chat is gated on the match's `is_chat_enabled` flag, which is only set once
both participants have staked. The gate is evaluated on every read and write;
there is no stored per-user permission.
"""

import logging
from typing import BinaryIO, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api.aws_bucket_funcs import funcs as bucket
from bartr.api.errors import DomainPrecondition, UpstreamFailure, ValidationFailed
from bartr.database.core.lifecycle import load_match_for
from bartr.database.core.serializers import message_to_dict
from bartr.database.daos.chat_message_dao import ChatMessageDao
from bartr.database.entities.matches import Match
from bartr.database.entities.messages import ChatMessage
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

CHAT_LOCKED_NOTICE = "Both users need to stake credits to enable chat."


def ensure_chat_enabled(match: Match) -> None:
    """Raise `DomainPrecondition("chat_locked")` unless both sides staked."""
    if not match.is_chat_enabled:
        raise DomainPrecondition("chat_locked", CHAT_LOCKED_NOTICE)


@transactional
def send_message(session: Session, actor_id: UUID, match_id: UUID, body: str) -> dict:
    """Append a text message from the actor to the match chat."""
    if body is None or not body.strip():
        raise ValidationFailed("Message cannot be empty")
    match = load_match_for(session, match_id, actor_id)
    ensure_chat_enabled(match)
    message = ChatMessageDao().createMessage(
        session, ChatMessage(match_id=match.id, sender_id=actor_id, message=body.strip())
    )
    return message_to_dict(message)


@transactional
def send_file(
    session: Session,
    actor_id: UUID,
    match_id: UUID,
    fileobj: BinaryIO,
    file_name: str,
    content_type: Optional[str] = None,
) -> dict:
    """
    Upload an attachment and post a message referencing it.

    The upload happens first; if it fails nothing is written and the caller
    gets an `UpstreamFailure`.

    Parameters
    ----------
    fileobj : BinaryIO
        Readable stream of the file content.
    file_name : str
        Original file name, used for the object key and the message text.
    content_type : str, optional
        MIME type forwarded to the object store.
    """
    if not file_name:
        raise ValidationFailed("No file provided")
    match = load_match_for(session, match_id, actor_id)
    ensure_chat_enabled(match)

    key = bucket.attachment_key(match.id, file_name)
    try:
        s3_client = bucket.get_client()
        bucket.upload(fileobj, key, file_name, s3_client, content_type=content_type)
        file_url = bucket.download(key, s3_client)
    except Exception as e:
        logger.exception("Attachment upload failed for match %s", match.id)
        raise UpstreamFailure("File upload failed", str(e)) from e

    message = ChatMessageDao().createMessage(
        session,
        ChatMessage(
            match_id=match.id,
            sender_id=actor_id,
            message=f"Sent a file: {file_name}",
            file_url=file_url,
            file_name=file_name,
        ),
    )
    logger.info("User %s sent file %s in match %s", actor_id, key, match.id)
    return message_to_dict(message)


@transactional
def list_messages(session: Session, actor_id: UUID, match_id: UUID) -> list[dict]:
    """The match's messages, oldest first."""
    match = load_match_for(session, match_id, actor_id)
    ensure_chat_enabled(match)
    return [message_to_dict(m) for m in ChatMessageDao().fetchMessagesByMatchId(session, match.id)]


@transactional
def check_chat_access(session: Session, actor_id: UUID, match_id: UUID) -> dict:
    """Participant check used before a live chat subscription is opened."""
    match = load_match_for(session, match_id, actor_id)
    return {"matchId": str(match.id), "chatEnabled": match.is_chat_enabled}
