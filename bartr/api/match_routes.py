"""
FastAPI Router — Matches • Stake • Chat • Submissions • Settlement
==================================================================

Endpoints under ``/api/matches`` for everything that happens after two
members are matched:

- list / fetch matches (with the partner's public profile)
- stake credits to unlock chat
- chat messages and file attachments (only once both sides staked)
- submit completed work and list submissions
- confirm completion, which settles the match

Every handler requires authentication and participant membership; state
changes are pushed to the match topic and to both participants after commit.
Handlers that publish are coroutines; their service call runs in the
threadpool so database locks and uploads never block the event loop.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from bartr.api.events import broker, match_topic, notify_credits, notify_match
from bartr.api.models import NewMessage, ProjectSubmission
from bartr.api.utils import get_current_user_id
from bartr.database.core.chat import list_messages, send_file, send_message
from bartr.database.core.lifecycle import (
    confirm_completion,
    get_match,
    list_matches,
    list_submissions,
    stake,
    submit_project,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/matches')


@router.get('')
def matches(user_id: UUID = Depends(get_current_user_id)):
    """Every match of the caller, newest first."""
    return list_matches(actor_id=user_id)


@router.get('/{match_id}')
def match_detail(match_id: UUID, user_id: UUID = Depends(get_current_user_id)):
    return get_match(actor_id=user_id, match_id=match_id)


@router.post('/{match_id}/stake')
async def stake_route(match_id: UUID, user_id: UUID = Depends(get_current_user_id)):
    """Stake the match's fixed amount.

    Errors:
        400 insufficient_credits, 409 already staked / match not active.
    """
    result = await run_in_threadpool(stake, actor_id=user_id, match_id=match_id)
    notify_match(result["match"])
    notify_credits(user_id, result["balance"])
    return result


@router.get('/{match_id}/messages')
def messages(match_id: UUID, user_id: UUID = Depends(get_current_user_id)):
    """Chat history; 409 `chat_locked` until both sides staked."""
    return list_messages(actor_id=user_id, match_id=match_id)


@router.post('/{match_id}/messages')
async def new_message(match_id: UUID, data: NewMessage, user_id: UUID = Depends(get_current_user_id)):
    message = await run_in_threadpool(send_message, actor_id=user_id, match_id=match_id, body=data.message)
    broker.publish(match_topic(match_id), "message.created", message)
    return message


@router.post('/{match_id}/files')
async def new_file(match_id: UUID, file: UploadFile = File(...), user_id: UUID = Depends(get_current_user_id)):
    """Upload an attachment and post it to the chat."""
    message = await run_in_threadpool(
        send_file,
        actor_id=user_id,
        match_id=match_id,
        fileobj=file.file,
        file_name=file.filename or "",
        content_type=file.content_type,
    )
    broker.publish(match_topic(match_id), "message.created", message)
    return message


@router.post('/{match_id}/submit')
async def submit(match_id: UUID, data: ProjectSubmission, user_id: UUID = Depends(get_current_user_id)):
    """Submit (or resubmit) the caller's completed work; returns {bothSubmitted}."""
    result = await run_in_threadpool(submit_project, actor_id=user_id, match_id=match_id, content=data.content)
    notify_match(result["match"])
    return result


@router.get('/{match_id}/submissions')
def submissions(match_id: UUID, user_id: UUID = Depends(get_current_user_id)):
    return list_submissions(actor_id=user_id, match_id=match_id)


@router.post('/{match_id}/confirm')
async def confirm(match_id: UUID, user_id: UUID = Depends(get_current_user_id)):
    """Settle the match: refund both stakes and grant the completion bonus."""
    result = await run_in_threadpool(confirm_completion, actor_id=user_id, match_id=match_id)
    notify_match(result["match"])
    for participant, balance in result["balances"].items():
        notify_credits(participant, balance)
    return result
