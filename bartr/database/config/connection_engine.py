"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds a SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` to avoid hardcoding credentials, unless a full
  `DATABASE_URL` is configured.
- SQLite URLs (local runs, test suite) share one connection through a
  `StaticPool` so an in-memory database survives across sessions and threads.
- All ORM models must inherit from `declarativeBase`.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import MetaData
from bartr.database.config.config import settings

if settings.DATABASE_URL:
    connection_url = make_url(settings.DATABASE_URL)
else:
    connection_url = URL.create(
        drivername=settings.DB_DRIVER_NAME,
        username=settings.DB_USERNAME,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        database=settings.DB_DATABASE_NAME,
    )
"""SQLAlchemy connection URL, built from Settings."""

if connection_url.get_backend_name() == "sqlite":
    connection_engine = create_engine(
        connection_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    connection_engine = create_engine(connection_url, pool_pre_ping=True)
"""Engine object: Core interface to the database.
Responsible for managing connections, executing SQL, and pooling.
"""

metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables, constraints, indexes, etc. Shared across all models.
"""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models.
All model classes should inherit from this to gain ORM features and automatic schema generation.
"""
