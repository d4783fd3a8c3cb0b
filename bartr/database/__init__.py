"""
The `database` package is responsible for all interactions with the application's database.
It provides configuration, entity definitions, data access and the transactional
services that implement the marketplace's business rules.

Contents:
    - config:
        Settings and the SQLAlchemy engine / declarative base.

    - entities:
        SQLAlchemy entity models: users, swipes, requests, matches,
        submissions, chat messages and credited checkout sessions.

    - daos:
        Data Access Objects providing queries and persistence for the entities.

    - core:
        Services that connect the API routers with the database: accounts,
        interest, match lifecycle, chat, expiry, wallet and checkout.

    - helpers:
        The `@transactional` session/transaction decorator.
"""
