"""
Core Package — Transactional Services
=====================================

Business operations of the marketplace. Every public function runs inside a
`@transactional` session and returns plain dicts ready for JSON rendering.

Contents
--------
- accounts: registration, login, profiles, browse and swipe candidates
- interest: swipes, pending requests, match creation
- lifecycle: stake, submission, settlement, match read models
- chat: gated messages and file attachments
- expiry: the expired-match sweep
- wallet: the credit ledger helper and balance lookup
- checkout: credit top-ups from completed payment sessions
- serializers: entity to dict conversion
"""

import bartr.database.entities  # noqa: F401  (registers every table before any session is used)
