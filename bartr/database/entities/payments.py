"""
CheckoutPayment ORM Model
=========================

Records every completed payment-processor checkout session that has been
converted into credits. The session id is the primary key, so a session can
only ever be credited once no matter how often the verification endpoint is
called.
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import TEXT, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import Mapped, mapped_column

from bartr.database.config.connection_engine import declarativeBase


class CheckoutPayment(declarativeBase):
    """ORM model for the `checkout_payment` table."""

    __tablename__ = "checkout_payment"

    session_id: Mapped[str] = mapped_column(TEXT, primary_key=True)
    """Checkout session id issued by the payment processor."""

    user_id: Mapped[UUID] = mapped_column(pgUUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False)
    amount_total: Mapped[int] = mapped_column(Integer, nullable=False)
    """Amount paid, in the currency's minor unit."""

    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    """Credits granted for this payment."""

    processed_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __init__(self, session_id: str, user_id: UUID, amount_total: int, credits: int):
        self.session_id = session_id
        self.user_id = user_id
        self.amount_total = amount_total
        self.credits = credits
        self.processed_on = datetime.now(timezone.utc)
