"""
Expiry sweep for matches that ran past their deadline with only one side
having submitted.

The sweep reads the candidate ids in one transaction and then resolves each
match in its own transaction, so a failure on one match neither blocks nor
rolls back the others. A resolved match leaves the ``active`` state and is
therefore never picked up again.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api.errors import DomainPrecondition, NotFound
from bartr.database.core.serializers import match_to_dict
from bartr.database.core.wallet import adjust_balance
from bartr.database.daos.match_dao import MatchDao
from bartr.database.daos.user_dao import UserDao
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


@transactional
def find_expired_matches(session: Session, now: Optional[datetime] = None) -> list[UUID]:
    """Ids of active, chat-enabled matches past deadline with unequal submission flags."""
    now = now or datetime.now(timezone.utc)
    return [match.id for match in MatchDao().fetchExpiredMatches(session, now)]


@transactional
def handle_expired_match(session: Session, match_id: UUID) -> dict:
    """
    Force-resolve one expired match.

    The participant who submitted gets their stake back; the other side's
    stake is forfeited. The match moves to ``expired``.

    Raises
    ------
    NotFound
        No such match.
    DomainPrecondition
        The match is no longer active, or does not have exactly one submission.
    """
    match = MatchDao().fetchMatchById(session, match_id, for_update=True)
    if match is None:
        raise NotFound("Match not found")
    if match.status != "active":
        raise DomainPrecondition("Match is not active", {"status": match.status})
    if match.project_submitted_user1 == match.project_submitted_user2:
        raise DomainPrecondition("Match does not have exactly one submission")

    submitter_id = match.user1_id if match.project_submitted_user1 else match.user2_id
    user = UserDao().fetchUserById(session, submitter_id, for_update=True)
    if match.has_staked(submitter_id):
        adjust_balance(session, user, match.stake_amount, reason=f"expiry refund match {match.id}")

    match.status = "expired"
    match.completed_on = datetime.now(timezone.utc)
    logger.info("Match %s expired; stake refunded to %s, counterpart forfeited", match.id, submitter_id)
    return {"match": match_to_dict(match), "refundedUserId": str(submitter_id)}


def sweep_expired_matches(now: Optional[datetime] = None) -> dict:
    """
    Resolve every expired match once.

    Returns
    -------
    dict
        ``{"success": bool, "processed": [match ids], "failed": [{"matchId", "error"}],
        "total_expired": int}``. ``success`` is false when any match failed.
    """
    expired_ids = find_expired_matches(now=now)
    processed, failed = [], []
    for match_id in expired_ids:
        try:
            handle_expired_match(match_id=match_id)
            processed.append(str(match_id))
        except Exception as e:
            logger.exception("Failed to resolve expired match %s", match_id)
            failed.append({"matchId": str(match_id), "error": str(e)})

    logger.info("Expiry sweep: %d expired, %d processed, %d failed", len(expired_ids), len(processed), len(failed))
    return {
        "success": not failed,
        "processed": processed,
        "failed": failed,
        "total_expired": len(expired_ids),
    }
