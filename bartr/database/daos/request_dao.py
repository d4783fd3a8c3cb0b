"""
Pending Request DAO

Purpose
-------
Data-access layer for the `PendingRequest` ORM entity:
- Create a request
- Fetch by id (optionally row-locked while it is being resolved)
- List incoming / outgoing pending requests
- Find a pending request for a given direction
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from bartr.database.entities.swipes import PendingRequest

logger = logging.getLogger(__name__)


class PendingRequestDao:
    """
    Data Access Object (DAO) for PendingRequest records.
    """

    def createRequest(self, session: Session, request: PendingRequest) -> PendingRequest:
        try:
            session.add(request)
            session.flush()
            return request
        except Exception as e:
            logger.error("Error in PendingRequestDao.createRequest. Error Message: %s", e)
            raise

    def fetchRequestById(self, session: Session, request_id: UUID, for_update: bool = False) -> Optional[PendingRequest]:
        """
        Fetch a request by id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        request_id : UUID
            Id of the request.
        for_update : bool, optional
            Lock the row until the end of the transaction.
        """
        try:
            query = session.query(PendingRequest).filter(PendingRequest.id == request_id)
            if for_update:
                query = query.with_for_update()
            return query.one_or_none()
        except Exception as e:
            logger.error("Error in PendingRequestDao.fetchRequestById. Error Message: %s", e)
            raise

    def fetchPendingRequest(self, session: Session, sender_id: UUID, receiver_id: UUID) -> Optional[PendingRequest]:
        """Fetch the pending request from `sender_id` to `receiver_id`, if any."""
        try:
            return (
                session.query(PendingRequest)
                .filter(
                    PendingRequest.sender_id == sender_id,
                    PendingRequest.receiver_id == receiver_id,
                    PendingRequest.status == "pending",
                )
                .first()
            )
        except Exception as e:
            logger.error("Error in PendingRequestDao.fetchPendingRequest. Error Message: %s", e)
            raise

    def fetchIncomingRequests(self, session: Session, receiver_id: UUID) -> List[PendingRequest]:
        """Pending requests addressed to `receiver_id`, newest first."""
        try:
            return (
                session.query(PendingRequest)
                .filter(PendingRequest.receiver_id == receiver_id, PendingRequest.status == "pending")
                .order_by(desc(PendingRequest.created_on))
                .all()
            )
        except Exception as e:
            logger.error("Error in PendingRequestDao.fetchIncomingRequests. Error Message: %s", e)
            raise

    def fetchOutgoingRequests(self, session: Session, sender_id: UUID) -> List[PendingRequest]:
        """Pending requests sent by `sender_id`, newest first."""
        try:
            return (
                session.query(PendingRequest)
                .filter(PendingRequest.sender_id == sender_id, PendingRequest.status == "pending")
                .order_by(desc(PendingRequest.created_on))
                .all()
            )
        except Exception as e:
            logger.error("Error in PendingRequestDao.fetchOutgoingRequests. Error Message: %s", e)
            raise

    def updateStatus(self, session: Session, request: PendingRequest, status: str) -> PendingRequest:
        try:
            request.status = status
            return request
        except Exception as e:
            logger.error("Error in PendingRequestDao.updateStatus. Error Message: %s", e)
            raise
