"""
Stripe Checkout helpers.

Thin wrappers around the official `stripe` SDK so the rest of the code only
sees plain dicts:

- `create_checkout_session` opens a hosted payment page for a credit top-up
- `retrieve_checkout_session` reads a session back when the user returns

Configuration (from `bartr.database.config.config.settings`)
------------------------------------------------------------
- STRIPE_SECRET_KEY : API secret key
- CHECKOUT_CURRENCY : ISO currency code of the top-up (default "inr")
- FRONTEND_URL      : base of the success / cancel redirect URLs
"""

import logging
from uuid import UUID

import stripe

from bartr.api.errors import UpstreamFailure
from bartr.database.config.config import settings

logger = logging.getLogger(__name__)


def _field(obj, name, default=None):
    try:
        value = obj[name]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def create_checkout_session(user_id: UUID, amount: int) -> dict:
    """
    Create a one-off payment session for `amount` major currency units.

    Returns:
        dict: ``{"url": str, "sessionId": str}``

    Raises:
        UpstreamFailure: the payment processor rejected the call.
    """
    try:
        session = stripe.checkout.Session.create(
            api_key=settings.STRIPE_SECRET_KEY,
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": settings.CHECKOUT_CURRENCY,
                        "product_data": {"name": "Bartr credits"},
                        "unit_amount": amount * 100,
                    },
                    "quantity": 1,
                }
            ],
            metadata={"user_id": str(user_id)},
            success_url=f"{settings.FRONTEND_URL}/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.FRONTEND_URL}/credits-store?canceled=true",
        )
    except stripe.StripeError as e:
        logger.error("Stripe checkout creation failed for user %s: %s", user_id, e)
        raise UpstreamFailure("Failed to create checkout session", str(e)) from e
    logger.info("Checkout session %s created for user %s (%s)", session.id, user_id, amount)
    return {"url": session.url, "sessionId": session.id}


def retrieve_checkout_session(session_id: str) -> dict:
    """
    Read a checkout session.

    Returns:
        dict: ``{"id", "status", "amount_total", "user_id", "customer_email"}``
        where ``user_id`` is the id stored in the session metadata (or None).
    """
    try:
        session = stripe.checkout.Session.retrieve(session_id, api_key=settings.STRIPE_SECRET_KEY)
    except stripe.StripeError as e:
        logger.error("Stripe checkout retrieval failed for %s: %s", session_id, e)
        raise UpstreamFailure("Failed to retrieve checkout session", str(e)) from e

    metadata = _field(session, "metadata", {})
    customer_details = _field(session, "customer_details", {})
    return {
        "id": session_id,
        "status": _field(session, "status"),
        "amount_total": _field(session, "amount_total", 0),
        "user_id": _field(metadata, "user_id"),
        "customer_email": _field(customer_details, "email"),
    }
