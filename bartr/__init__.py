"""
Bartr — skill-bartering marketplace backend.

Subpackages
-----------
- api: FastAPI routers, request models, JWT helpers, realtime events and the
  payment / object storage / LLM integrations
- database: settings, engine, ORM entities, DAOs and transactional services
- crypt: password hashing
- jobs: command-line entry points for scheduled work
"""
