"""
Credit top-ups through the payment processor.

A completed checkout session is converted into credits exactly once: the
session id is recorded in `checkout_payment` inside the same transaction that
credits the balance, so verifying the same session again returns the earlier
result instead of crediting twice.
"""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from bartr.api import payments
from bartr.api.errors import AuthorizationError, NotFound, ValidationFailed
from bartr.database.config.config import settings
from bartr.database.core.wallet import adjust_balance
from bartr.database.daos.payment_dao import CheckoutPaymentDao
from bartr.database.daos.user_dao import UserDao
from bartr.database.entities.payments import CheckoutPayment
from bartr.database.helpers.transactionManagement import transactional

logger = logging.getLogger(__name__)


def credits_for_amount(amount_total: int) -> int:
    """Credits bought by `amount_total` minor currency units (rounded down)."""
    major_units = (amount_total or 0) // 100
    return major_units // settings.CURRENCY_UNITS_PER_CREDIT


def start_checkout(actor_id: UUID, amount) -> dict:
    """Open a checkout session for a positive whole `amount` of currency."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationFailed("Amount must be a positive integer")
    return payments.create_checkout_session(actor_id, amount)


@transactional
def record_checkout(session: Session, actor_id: UUID, session_id: str, amount_total: int) -> dict:
    """
    Credit the actor for a completed checkout session, once.

    Returns
    -------
    dict
        ``{"status": "complete", "creditsEarned": int, "balance": int,
        "alreadyProcessed": bool}``
    """
    payment_dao = CheckoutPaymentDao()
    user = UserDao().fetchUserById(session, actor_id, for_update=True)
    if user is None:
        raise NotFound("User not found")

    existing = payment_dao.fetchBySessionId(session, session_id)
    if existing is not None:
        logger.info("Checkout session %s already credited", session_id)
        return {
            "status": "complete",
            "creditsEarned": existing.credits,
            "balance": user.credits,
            "alreadyProcessed": True,
        }

    earned = credits_for_amount(amount_total)
    payment_dao.createPayment(
        session,
        CheckoutPayment(session_id=session_id, user_id=actor_id, amount_total=amount_total or 0, credits=earned),
    )
    balance = adjust_balance(session, user, earned, reason=f"checkout {session_id}")
    return {"status": "complete", "creditsEarned": earned, "balance": balance, "alreadyProcessed": False}


def verify_checkout(actor_id: UUID, session_id: str) -> dict:
    """
    Look up a checkout session and credit the actor if it is complete.

    Raises
    ------
    ValidationFailed
        Missing session id.
    AuthorizationError
        The session was opened for a different user.
    """
    if not session_id:
        raise ValidationFailed("Please provide a valid session_id")

    checkout = payments.retrieve_checkout_session(session_id)
    owner = checkout.get("user_id")
    if owner is not None and owner != str(actor_id):
        logger.warning("User %s tried to verify checkout %s of user %s", actor_id, session_id, owner)
        raise AuthorizationError("This checkout session belongs to another user")

    if checkout["status"] != "complete":
        return {"status": checkout["status"]}

    result = record_checkout(actor_id=actor_id, session_id=session_id, amount_total=checkout["amount_total"])
    result["amount"] = (checkout["amount_total"] or 0) / 100
    result["customerEmail"] = checkout.get("customer_email")
    return result
