"""
Credit ledger helpers.

The balance lives on `User.credits`; there is no separate transaction log.
Every mutation goes through `adjust_balance`, which expects the row to be
locked by the caller's transaction so concurrent credit operations on the
same user serialize instead of losing updates.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api.errors import InsufficientCredits, NotFound
from bartr.database.daos.user_dao import UserDao
from bartr.database.entities.user import User
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def adjust_balance(session: Session, user: User, delta: int, reason: str) -> int:
    """
    Add `delta` (may be negative) to the user's balance.

    Parameters
    ----------
    session : Session
        The transaction holding the lock on `user`.
    user : User
        Locked user row.
    delta : int
        Credits to add; negative values debit.
    reason : str
        Short label for the log line (e.g. "stake", "refund", "bonus").

    Returns
    -------
    int
        The new balance.

    Raises
    ------
    InsufficientCredits
        If a debit would take the balance below zero.
    """
    current = user.credits or 0
    if current + delta < 0:
        raise InsufficientCredits(
            details={"message": "Insufficient credits", "balance": current, "required": -delta},
        )
    user.credits = current + delta
    logger.info("Credits %+d for user %s (%s): %s -> %s", delta, user.id, reason, current, user.credits)
    return user.credits


@transactional
def get_wallet_balance(session: Session, user_id: UUID) -> dict:
    """Return `{"balance": int}` for the user."""
    user = UserDao().fetchUserById(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return {"balance": user.credits or 0}
