"""
Configuration — Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed application configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- `extra="ignore"`: unknown env vars are ignored (not an error).
- Business constants of the match lifecycle (stake amount, completion bonus,
  project duration) live here so deployments can tune them without code changes.

Usage
-----
from bartr.database.config.config import settings

# Example
stake = settings.STAKE_AMOUNT
openai_model = settings.OPEN_AI_MODEL

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field("http://localhost:3000", description="Base URL of the frontend client application.")
    INIT_MODE: str = Field("runtime", description="Initialization mode. 'runtime' creates the schema on startup.")

    DB_USERNAME: str = Field("bartr", description="Database username credential.")
    DB_PASSWORD: str = Field("", description="Database password credential.")
    DB_HOST: str = Field("localhost", description="Hostname or IP address of the database server.")
    DB_DATABASE_NAME: str = Field("bartr", description="Name of the application's database.")
    DB_DRIVER_NAME: str = Field("postgresql+psycopg2", description="Database driver (e.g., `postgresql+psycopg2`).")
    DATABASE_URL: Optional[str] = Field(None, description="Full SQLAlchemy URL. Overrides the DB_* parts when set.")

    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24 * 7, description="Duration (in minutes) before access tokens expire.")
    SECRET_KEY: str = Field("change-me", description="Secret key for signing tokens.")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., `HS256`).")

    API_KEY: str = Field("", description="OpenAI API key used by AI-assisted matching. Empty disables the LLM call.")
    OPEN_AI_MODEL: str = Field("gpt-4o-mini", description="OpenAI model name (e.g., `gpt-4o-mini`).")

    AWS_ACCESS_KEY: str = Field("", description="AWS access key ID.")
    AWS_SECRET_KEY: str = Field("", description="AWS secret access key.")
    BUCKET_NAME: str = Field("chat-files", description="S3 bucket holding chat attachments.")
    REGION: str = Field("eu-central-1", description="AWS region name (e.g., `eu-central-1`).")

    STRIPE_SECRET_KEY: str = Field("", description="Stripe secret API key.")
    CHECKOUT_CURRENCY: str = Field("inr", description="ISO currency code used for credit purchases.")
    CURRENCY_UNITS_PER_CREDIT: int = Field(10, description="Major currency units that buy one credit.")

    JOB_SECRET: str = Field("", description="Shared secret required by the scheduled-job HTTP trigger.")

    SWIPE_MATCH_MODE: Literal["mutual", "request"] = Field(
        "mutual", description="'mutual': reciprocal likes create a match. 'request': a like creates a pending request."
    )
    STAKE_AMOUNT: int = Field(10, description="Credits each side stakes before chat unlocks.")
    COMPLETION_BONUS: int = Field(8, description="Credits granted to both sides on settlement.")
    PROJECT_DURATION_DAYS: int = Field(7, description="Days between match creation and the project deadline.")


settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
