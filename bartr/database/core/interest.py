"""
Service-layer operations for directional interest: swipes, connection
requests and the match they produce.

All functions are wrapped with `@transactional`. Match creation is a
get-or-create on the canonical pair, so two users liking each other at the
same moment (or a request being accepted twice) still leaves exactly one
Match row.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api.errors import AuthorizationError, DomainPrecondition, NotFound, ValidationFailed
from bartr.database.config.config import settings
from bartr.database.core.serializers import match_to_dict, request_to_dict
from bartr.database.daos.match_dao import MatchDao
from bartr.database.daos.request_dao import PendingRequestDao
from bartr.database.daos.swipe_dao import SwipeDao
from bartr.database.daos.user_dao import UserDao
from bartr.database.entities.swipes import SWIPE_DIRECTIONS, PendingRequest
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)

REQUEST_ACTIONS = {"accept": "accepted", "reject": "rejected"}
REQUEST_LIST_TYPES = ("incoming", "pending")


def _create_match(session: Session, user_a: UUID, user_b: UUID) -> tuple[dict, bool]:
    """Get-or-create the pair's match in its default state."""
    deadline = datetime.now(timezone.utc) + timedelta(days=settings.PROJECT_DURATION_DAYS)
    match, created = MatchDao().getOrCreateMatch(
        session,
        user_a,
        user_b,
        stake_amount=settings.STAKE_AMOUNT,
        project_end_date=deadline,
    )
    if created:
        logger.info("Match %s created between %s and %s", match.id, match.user1_id, match.user2_id)
    return match_to_dict(match), created


def _lock_pair(session: Session, actor_id: UUID, target_id: Optional[UUID]) -> None:
    """
    Validate the target and lock both user rows.

    Interest between the same two users is serialized on these locks, so the
    second of two crossing likes always sees the first one.
    """
    if target_id is None:
        raise ValidationFailed("Missing target user")
    if target_id == actor_id:
        raise ValidationFailed("You cannot target yourself")
    locked = UserDao().fetchUsersForUpdate(session, [actor_id, target_id])
    if target_id not in {user.id for user in locked}:
        raise NotFound("User not found")


def _open_request(session: Session, sender_id: UUID, receiver_id: UUID) -> tuple[PendingRequest, bool]:
    request_dao = PendingRequestDao()
    existing = request_dao.fetchPendingRequest(session, sender_id, receiver_id)
    if existing is not None:
        return existing, False
    request = request_dao.createRequest(session, PendingRequest(sender_id=sender_id, receiver_id=receiver_id))
    logger.info("Pending request %s: %s -> %s", request.id, sender_id, receiver_id)
    return request, True


@transactional
def record_interest(session: Session, actor_id: UUID, target_id: Optional[UUID], direction: str) -> dict:
    """
    Record a swipe from `actor_id` on `target_id`.

    The swipe row is upserted on (swiper, target) so repeating a swipe never
    creates a second record; the latest direction wins. What a `like` does next
    depends on `settings.SWIPE_MATCH_MODE`:

    - ``mutual``: a reciprocal like creates the match.
    - ``request``: a pending connection request is opened instead.

    Returns
    -------
    dict
        ``{"success": True, "matchCreated": bool, "match": dict | None}`` in
        mutual mode, ``{"success": True, "pendingRequestCreated": bool,
        "request": dict | None}`` in request mode.
    """
    if direction not in SWIPE_DIRECTIONS:
        raise ValidationFailed("Invalid direction", {"allowed": list(SWIPE_DIRECTIONS)})
    _lock_pair(session, actor_id, target_id)

    swipe_dao = SwipeDao()
    swipe_dao.upsertSwipe(session, actor_id, target_id, direction)

    if settings.SWIPE_MATCH_MODE == "request":
        result = {"success": True, "pendingRequestCreated": False, "request": None}
        if direction == "like":
            request, created = _open_request(session, actor_id, target_id)
            result["pendingRequestCreated"] = created
            result["request"] = request_to_dict(request, "receiver", None) if created else None
        return result

    result = {"success": True, "matchCreated": False, "match": None}
    if direction == "like" and swipe_dao.hasLiked(session, target_id, actor_id):
        match, created = _create_match(session, actor_id, target_id)
        result["matchCreated"] = created
        result["match"] = match
    return result


@transactional
def send_request(session: Session, actor_id: UUID, receiver_id: Optional[UUID]) -> dict:
    """Open a connection request to `receiver_id` directly, without a swipe."""
    _lock_pair(session, actor_id, receiver_id)
    request, created = _open_request(session, actor_id, receiver_id)
    return {"success": True, "created": created, "request": request_to_dict(request, "receiver", None)}


@transactional
def resolve_request(session: Session, actor_id: UUID, request_id: UUID, action: str) -> dict:
    """
    Accept or reject a pending request addressed to the actor.

    Accepting creates the match of sender and receiver (or reuses it if the
    pair is already matched).

    Raises
    ------
    ValidationFailed
        Unknown action.
    NotFound
        No such request.
    AuthorizationError
        The actor is not the receiver.
    DomainPrecondition
        The request was already resolved.
    """
    status = REQUEST_ACTIONS.get(action)
    if status is None:
        raise ValidationFailed("Invalid action", {"allowed": list(REQUEST_ACTIONS)})

    request_dao = PendingRequestDao()
    request = request_dao.fetchRequestById(session, request_id, for_update=True)
    if request is None:
        raise NotFound("Request not found")
    if request.receiver_id != actor_id:
        raise AuthorizationError("Only the receiver can resolve this request")
    if request.status != "pending":
        raise DomainPrecondition("Request already resolved", {"status": request.status})

    request_dao.updateStatus(session, request, status)
    logger.info("Request %s %s by %s", request.id, status, actor_id)

    result = {
        "success": True,
        "status": status,
        "senderId": str(request.sender_id),
        "receiverId": str(request.receiver_id),
        "match": None,
        "matchCreated": False,
    }
    if status == "accepted":
        match, created = _create_match(session, request.sender_id, request.receiver_id)
        result["match"] = match
        result["matchCreated"] = created
    return result


@transactional
def list_requests(session: Session, actor_id: UUID, list_type: str) -> list[dict]:
    """
    Pending requests involving the actor, each joined with the other side's
    public profile.

    ``incoming`` lists requests the actor received (counterpart under
    ``sender``), ``pending`` those the actor sent (counterpart under
    ``receiver``).
    """
    if list_type not in REQUEST_LIST_TYPES:
        raise ValidationFailed("Invalid type", {"allowed": list(REQUEST_LIST_TYPES)})

    request_dao = PendingRequestDao()
    user_dao = UserDao()
    if list_type == "incoming":
        requests = request_dao.fetchIncomingRequests(session, actor_id)
        return [
            request_to_dict(r, "sender", user_dao.fetchUserById(session, r.sender_id)) for r in requests
        ]
    requests = request_dao.fetchOutgoingRequests(session, actor_id)
    return [request_to_dict(r, "receiver", user_dao.fetchUserById(session, r.receiver_id)) for r in requests]
