"""
Match DAO

Purpose
-------
Data-access layer for the `Match` and `Submission` ORM entities:
- Get-or-create of the single match of a canonical user pair
- Lookup by id (optionally row-locked) and by participant
- The expiry query used by the scheduled sweeper
- Submission upsert and listing

Design
------
- Requires an active SQLAlchemy `Session` provided by the caller.
- Match creation runs inside a SAVEPOINT so a concurrent insert of the same
  pair (unique constraint `uq_match_pair`) is swallowed and the existing row
  is returned instead.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bartr.database.entities.matches import Match, Submission, canonical_pair

logger = logging.getLogger(__name__)


class MatchDao:
    """
    Data Access Object (DAO) for Match and Submission records.
    """

    def fetchMatchById(self, session: Session, match_id: UUID, for_update: bool = False) -> Optional[Match]:
        """
        Fetch a match by id.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session.
        match_id : UUID
            Id of the match.
        for_update : bool, optional
            Lock the row until the end of the transaction.
        """
        try:
            query = session.query(Match).filter(Match.id == match_id)
            if for_update:
                query = query.with_for_update()
            return query.one_or_none()
        except Exception as e:
            logger.error("Error in MatchDao.fetchMatchById. Error Message: %s", e)
            raise

    def fetchMatchByPair(self, session: Session, user_a: UUID, user_b: UUID) -> Optional[Match]:
        """Fetch the match of two users, in either order."""
        user1_id, user2_id = canonical_pair(user_a, user_b)
        try:
            return (
                session.query(Match)
                .filter(Match.user1_id == user1_id, Match.user2_id == user2_id)
                .one_or_none()
            )
        except Exception as e:
            logger.error("Error in MatchDao.fetchMatchByPair. Error Message: %s", e)
            raise

    def getOrCreateMatch(
        self,
        session: Session,
        user_a: UUID,
        user_b: UUID,
        stake_amount: int,
        project_end_date: datetime,
    ) -> Tuple[Match, bool]:
        """
        Return the match of the pair, creating it in its default state if absent.

        Returns
        -------
        tuple[Match, bool]
            The match and whether this call created it.
        """
        existing = self.fetchMatchByPair(session, user_a, user_b)
        if existing is not None:
            return existing, False

        match = Match(user_a=user_a, user_b=user_b, stake_amount=stake_amount, project_end_date=project_end_date)
        try:
            with session.begin_nested():
                session.add(match)
        except IntegrityError:
            logger.info("Match between %s and %s already exists", match.user1_id, match.user2_id)
            return self.fetchMatchByPair(session, user_a, user_b), False
        except Exception as e:
            logger.error("Error in MatchDao.getOrCreateMatch. Error Message: %s", e)
            raise
        return match, True

    def fetchMatchesByUserId(self, session: Session, user_id: UUID) -> List[Match]:
        """Every match the user takes part in, newest first."""
        try:
            return (
                session.query(Match)
                .filter(or_(Match.user1_id == user_id, Match.user2_id == user_id))
                .order_by(desc(Match.created_on))
                .all()
            )
        except Exception as e:
            logger.error("Error in MatchDao.fetchMatchesByUserId. Error Message: %s", e)
            raise

    def fetchExpiredMatches(self, session: Session, now: datetime) -> List[Match]:
        """
        Active matches with chat enabled, deadline before `now`, and exactly
        one side submitted.
        """
        try:
            return (
                session.query(Match)
                .filter(
                    Match.status == "active",
                    Match.is_chat_enabled.is_(True),
                    Match.project_end_date.is_not(None),
                    Match.project_end_date < now,
                    Match.project_submitted_user1 != Match.project_submitted_user2,
                )
                .order_by(Match.project_end_date)
                .all()
            )
        except Exception as e:
            logger.error("Error in MatchDao.fetchExpiredMatches. Error Message: %s", e)
            raise

    def fetchSubmission(self, session: Session, match_id: UUID, user_id: UUID) -> Optional[Submission]:
        try:
            return (
                session.query(Submission)
                .filter(Submission.match_id == match_id, Submission.user_id == user_id)
                .one_or_none()
            )
        except Exception as e:
            logger.error("Error in MatchDao.fetchSubmission. Error Message: %s", e)
            raise

    def upsertSubmission(self, session: Session, match_id: UUID, user_id: UUID, content: str) -> Submission:
        """Store the user's work for the match, replacing an earlier submission."""
        try:
            submission = self.fetchSubmission(session, match_id, user_id)
            if submission is None:
                submission = Submission(match_id=match_id, user_id=user_id, content=content)
                session.add(submission)
            else:
                submission.content = content
            session.flush()
            return submission
        except Exception as e:
            logger.error("Error in MatchDao.upsertSubmission. Error Message: %s", e)
            raise

    def fetchSubmissionsByMatchId(self, session: Session, match_id: UUID) -> List[Submission]:
        try:
            return (
                session.query(Submission)
                .filter(Submission.match_id == match_id)
                .order_by(Submission.submitted_on)
                .all()
            )
        except Exception as e:
            logger.error("Error in MatchDao.fetchSubmissionsByMatchId. Error Message: %s", e)
            raise
