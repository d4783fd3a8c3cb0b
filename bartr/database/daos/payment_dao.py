"""
Checkout Payment DAO

Thin persistence for `CheckoutPayment` rows: lookup by session id (to skip
sessions that were already credited) and creation.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from bartr.database.entities.payments import CheckoutPayment

logger = logging.getLogger(__name__)


class CheckoutPaymentDao:

    def fetchBySessionId(self, session: Session, session_id: str) -> Optional[CheckoutPayment]:
        try:
            return (
                session.query(CheckoutPayment)
                .filter(CheckoutPayment.session_id == session_id)
                .with_for_update()
                .one_or_none()
            )
        except Exception as e:
            logger.error("Error in CheckoutPaymentDao.fetchBySessionId. Error Message: %s", e)
            raise

    def createPayment(self, session: Session, payment: CheckoutPayment) -> CheckoutPayment:
        try:
            session.add(payment)
            session.flush()
            return payment
        except Exception as e:
            logger.error("Error in CheckoutPaymentDao.createPayment. Error Message: %s", e)
            raise
