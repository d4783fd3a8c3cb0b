"""
DAOs Package — Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package encapsulates all interactions with the ORM entities,
providing CRUD APIs for the service layer while hiding query details.

Conventions
-----------
- Session lifecycle (open/commit/rollback) is handled by callers
  (`@transactional` services); DAOs never commit.
- DAOs log and surface exceptions so upper layers decide error policy.
- `for_update` variants lock rows for credit-affecting operations.

Contents
--------
- UserDao: user creation (password hashing), lookups, profile updates
- SwipeDao: swipe upsert and reciprocal-like lookup
- PendingRequestDao: connection requests
- MatchDao: matches, the expiry query, submissions
- ChatMessageDao: chat messages
- CheckoutPaymentDao: credited checkout sessions
"""
