"""
Swipe DAO

Purpose
-------
Data-access layer for the `Swipe` ORM entity:
- Upsert keyed on (swiper, swiped user), last write wins on direction
- Reciprocal-like lookup used to detect mutual interest
- Ids a member has already swiped on

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- The uniqueness of the pair is enforced by the `uq_swipe_pair` constraint.
  The DAO reads before writing so the common path never trips it, and a
  concurrent insert of the same pair is absorbed by a SAVEPOINT.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bartr.database.entities.swipes import Swipe

logger = logging.getLogger(__name__)


class SwipeDao:
    """
    Data Access Object (DAO) for Swipe records.
    """

    def fetchSwipe(self, session: Session, swiper_id: UUID, swiped_user_id: UUID) -> Optional[Swipe]:
        """
        Fetch the swipe of `swiper_id` on `swiped_user_id`, if any.
        """
        try:
            return (
                session.query(Swipe)
                .filter(Swipe.swiper_id == swiper_id, Swipe.swiped_user_id == swiped_user_id)
                .one_or_none()
            )
        except Exception as e:
            logger.error("Error in SwipeDao.fetchSwipe. Error Message: %s", e)
            raise

    def upsertSwipe(self, session: Session, swiper_id: UUID, swiped_user_id: UUID, direction: str) -> Swipe:
        """
        Record a swipe. An existing row for the pair is updated in place.

        The insert runs inside a SAVEPOINT: when a concurrent transaction wins
        the race for the pair, the constraint violation is swallowed and that
        row is updated instead.

        Returns
        -------
        Swipe
            The inserted or updated record.
        """
        try:
            swipe = self.fetchSwipe(session, swiper_id, swiped_user_id)
            if swipe is None:
                swipe = Swipe(swiper_id=swiper_id, swiped_user_id=swiped_user_id, direction=direction)
                try:
                    with session.begin_nested():
                        session.add(swipe)
                    return swipe
                except IntegrityError:
                    logger.info("Swipe %s -> %s inserted concurrently; updating it", swiper_id, swiped_user_id)
                    swipe = self.fetchSwipe(session, swiper_id, swiped_user_id)
            swipe.direction = direction
            swipe.created_on = datetime.now(timezone.utc)
            session.flush()
            return swipe
        except Exception as e:
            logger.error("Error in SwipeDao.upsertSwipe. Error Message: %s", e)
            raise

    def hasLiked(self, session: Session, swiper_id: UUID, swiped_user_id: UUID) -> bool:
        """True if `swiper_id` currently likes `swiped_user_id`."""
        swipe = self.fetchSwipe(session, swiper_id, swiped_user_id)
        return swipe is not None and swipe.direction == "like"

    def fetchSwipedUserIds(self, session: Session, swiper_id: UUID) -> List[UUID]:
        """Ids of every user `swiper_id` has swiped on, in either direction."""
        try:
            rows = session.query(Swipe.swiped_user_id).filter(Swipe.swiper_id == swiper_id).all()
            return [row[0] for row in rows]
        except Exception as e:
            logger.error("Error in SwipeDao.fetchSwipedUserIds. Error Message: %s", e)
            raise

