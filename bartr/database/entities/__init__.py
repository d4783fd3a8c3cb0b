"""
Entities Package — SQLAlchemy 2.0 ORM Models (PostgreSQL + UUID + UTC)
======================================================================

The `entities` package defines the ORM models of the marketplace. They are
consumed by the DAOs (`daos` package) and, through them, by the
transactional services in `core`.

Tech Stack & Conventions
------------------------
- PostgreSQL with native UUID columns
- Timezone-aware timestamps (UTC)
- SQLAlchemy 2.0 style `Mapped[...]` + `mapped_column(...)`
- Clear foreign keys and uniqueness constraints for relational integrity

Contents
--------
- User (`app_user`): credentials, profile, skills, credit balance
- Swipe (`swipe`): one row per (swiper, swiped user) pair
- PendingRequest (`pending_request`): explicit connection proposals
- Match (`matches`): stake, chat, submission and settlement state of a pair
- Submission (`submission`): delivered work per (match, user)
- ChatMessage (`message`): chat text and attachment references
- CheckoutPayment (`checkout_payment`): credited payment sessions

Importing this package registers every table on the shared metadata.
"""

from bartr.database.entities.user import User
from bartr.database.entities.swipes import Swipe, PendingRequest
from bartr.database.entities.matches import Match, Submission
from bartr.database.entities.messages import ChatMessage
from bartr.database.entities.payments import CheckoutPayment

__all__ = ["User", "Swipe", "PendingRequest", "Match", "Submission", "ChatMessage", "CheckoutPayment"]
