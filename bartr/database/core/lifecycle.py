"""
Service-layer operations for the match lifecycle: stake, submission and
settlement, plus the read models the match pages use.

Every credit-affecting function locks the Match row and the participants'
User rows (`SELECT ... FOR UPDATE`, users in id order) before reading any
flag or balance, and applies all of its effects inside the one transaction
opened by `@transactional`. A failure at any step rolls the whole operation
back.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api.errors import AuthorizationError, DomainPrecondition, NotFound, ValidationFailed
from bartr.database.config.config import settings
from bartr.database.core.serializers import match_to_dict, public_profile, submission_to_dict
from bartr.database.core.wallet import adjust_balance
from bartr.database.daos.match_dao import MatchDao
from bartr.database.daos.user_dao import UserDao
from bartr.database.entities.matches import Match
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def load_match_for(session: Session, match_id: UUID, actor_id: UUID, for_update: bool = False) -> Match:
    """
    Fetch a match the actor takes part in.

    Raises
    ------
    NotFound
        No such match.
    AuthorizationError
        The actor is not one of its two participants.
    """
    match = MatchDao().fetchMatchById(session, match_id, for_update=for_update)
    if match is None:
        raise NotFound("Match not found")
    if not match.involves(actor_id):
        raise AuthorizationError("You are not part of this match")
    return match


def _lock_participants(session: Session, match: Match) -> dict:
    users = UserDao().fetchUsersForUpdate(session, [match.user1_id, match.user2_id])
    return {user.id: user for user in users}


@transactional
def stake(session: Session, actor_id: UUID, match_id: UUID) -> dict:
    """
    Commit the actor's stake to the match.

    Debits `match.stake_amount` from the actor, sets the actor's stake flag and
    enables chat once both sides have staked.

    Returns
    -------
    dict
        ``{"match": dict, "balance": int, "chatEnabled": bool}``

    Raises
    ------
    DomainPrecondition
        Match not active, or actor already staked (409).
    InsufficientCredits
        Balance below the stake amount (400). Nothing is mutated.
    """
    match = load_match_for(session, match_id, actor_id, for_update=True)
    if match.status != "active":
        raise DomainPrecondition("Match is not active", {"status": match.status})
    if match.has_staked(actor_id):
        raise DomainPrecondition("You have already staked for this match")

    users = _lock_participants(session, match)
    balance = adjust_balance(session, users[actor_id], -match.stake_amount, reason=f"stake match {match.id}")

    if match.is_user1(actor_id):
        match.stake_status_user1 = True
    else:
        match.stake_status_user2 = True
    match.is_chat_enabled = match.both_staked

    logger.info(
        "User %s staked %s on match %s (chat enabled: %s)",
        actor_id,
        match.stake_amount,
        match.id,
        match.is_chat_enabled,
    )
    return {"match": match_to_dict(match), "balance": balance, "chatEnabled": match.is_chat_enabled}


@transactional
def submit_project(session: Session, actor_id: UUID, match_id: UUID, content: str) -> dict:
    """
    Store the actor's completed work and set their submission flag.

    Submitting again replaces the earlier content. Whether both sides have
    submitted is read back from the flags after the write.

    Returns
    -------
    dict
        ``{"success": True, "bothSubmitted": bool, "submission": dict, "match": dict}``
    """
    if content is None or not content.strip():
        raise ValidationFailed("Submission content is required")

    match = load_match_for(session, match_id, actor_id, for_update=True)
    if match.status != "active":
        raise DomainPrecondition("Match is not active", {"status": match.status})
    if not match.is_chat_enabled:
        raise DomainPrecondition("chat_locked", "Both users need to stake credits to enable chat.")

    match_dao = MatchDao()
    submission = match_dao.upsertSubmission(session, match.id, actor_id, content.strip())
    if match.is_user1(actor_id):
        match.project_submitted_user1 = True
    else:
        match.project_submitted_user2 = True
    session.flush()

    logger.info("User %s submitted work for match %s", actor_id, match.id)
    return {
        "success": True,
        "bothSubmitted": match.both_submitted,
        "submission": submission_to_dict(submission),
        "match": match_to_dict(match),
    }


@transactional
def confirm_completion(session: Session, actor_id: UUID, match_id: UUID) -> dict:
    """
    Settle a match once both sides have submitted.

    Refunds both stakes, marks the match completed and grants the completion
    bonus to both participants. Runs at most once per match: a settled match
    is no longer active and is rejected.

    Returns
    -------
    dict
        ``{"success": True, "match": dict, "balances": {user_id: int}}``

    Raises
    ------
    DomainPrecondition
        ``already_settled`` if the match is not active, or "both users must
        submit first" while a submission is missing. No balance changes in
        either case.
    """
    match = load_match_for(session, match_id, actor_id, for_update=True)
    if match.status != "active":
        raise DomainPrecondition("already_settled", {"status": match.status})
    if not match.both_submitted:
        raise DomainPrecondition("both users must submit first")

    users = _lock_participants(session, match)
    for user_id in (match.user1_id, match.user2_id):
        if match.has_staked(user_id):
            adjust_balance(session, users[user_id], match.stake_amount, reason=f"refund match {match.id}")

    match.status = "completed"
    match.completed_on = datetime.now(timezone.utc)

    balances = {}
    for user_id in (match.user1_id, match.user2_id):
        balances[str(user_id)] = adjust_balance(
            session, users[user_id], settings.COMPLETION_BONUS, reason=f"bonus match {match.id}"
        )

    logger.info("Match %s settled by %s", match.id, actor_id)
    return {"success": True, "match": match_to_dict(match), "balances": balances}


@transactional
def get_match(session: Session, actor_id: UUID, match_id: UUID) -> dict:
    """The match with the counterpart's public profile under ``partner``."""
    match = load_match_for(session, match_id, actor_id)
    partner = UserDao().fetchUserById(session, match.counterpart_of(actor_id))
    result = match_to_dict(match)
    result["partner"] = public_profile(partner) if partner is not None else None
    return result


@transactional
def list_matches(session: Session, actor_id: UUID) -> list[dict]:
    user_dao = UserDao()
    results = []
    for match in MatchDao().fetchMatchesByUserId(session, actor_id):
        partner = user_dao.fetchUserById(session, match.counterpart_of(actor_id))
        entry = match_to_dict(match)
        entry["partner"] = public_profile(partner) if partner is not None else None
        results.append(entry)
    return results


@transactional
def list_submissions(session: Session, actor_id: UUID, match_id: UUID) -> list[dict]:
    match = load_match_for(session, match_id, actor_id)
    return [submission_to_dict(s) for s in MatchDao().fetchSubmissionsByMatchId(session, match.id)]
