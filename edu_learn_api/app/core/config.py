"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, with defaults for every field so the API can
start against a local MongoDB without any setup.  In a production
deployment the database credentials, the token signing secret and the
cookie flags must be overridden via environment variables.
"""

import os
from dataclasses import dataclass
from urllib.parse import quote_plus


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _default_mongodb_uri() -> str:
    """Compose the MongoDB connection string.

    ``MONGODB_URI`` wins when set.  Otherwise, if ``DB_USER`` and
    ``DB_PASS`` are present, an Atlas style ``mongodb+srv`` URI is built
    from them and ``DB_HOST``.  Falls back to a local server.
    """
    uri = os.getenv("MONGODB_URI")
    if uri:
        return uri
    user = os.getenv("DB_USER")
    password = os.getenv("DB_PASS")
    if user and password:
        host = os.getenv("DB_HOST", "cluster0.mongodb.net")
        return (
            f"mongodb+srv://{quote_plus(user)}:{quote_plus(password)}@{host}/"
            "?retryWrites=true&w=majority"
        )
    return "mongodb://localhost:27017"


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Edu-Learn API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_bool("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file in addition to the console handler.
    log_file: str = os.getenv("LOG_FILE", "")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))
    # Routes are served at the root by default; set e.g. "/api/v1" to
    # mount them under a versioned prefix instead.
    api_prefix: str = os.getenv("API_PREFIX", "")
    # Comma-separated list of origins allowed to call the API with
    # credentials (the session cookie).
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60)))
    cookie_name: str = os.getenv("COOKIE_NAME", "token")
    cookie_secure: bool = _env_bool("COOKIE_SECURE")
    # "none" is required for cross-site frontends, and then browsers
    # also demand COOKIE_SECURE=true.
    cookie_samesite: str = os.getenv("COOKIE_SAMESITE", "lax")

    mongodb_uri: str = _default_mongodb_uri()
    mongodb_db: str = os.getenv("MONGODB_DB", "eduLearn")
    # Multi-document transactions require a replica set or sharded
    # cluster.  Leave disabled for standalone servers.
    mongodb_transactions: bool = _env_bool("MONGODB_TRANSACTIONS")
    mongodb_timeout_ms: int = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))

    max_enrollments_per_student: int = int(os.getenv("MAX_ENROLLMENTS_PER_STUDENT", "3"))

    # Token-info endpoint of an external identity provider.  When set,
    # bearer tokens that are not signed by ``secret_key`` are verified
    # against it.  Example for Google:
    # https://oauth2.googleapis.com/tokeninfo
    identity_provider_url: str = os.getenv("IDENTITY_PROVIDER_URL", "")
    identity_provider_audience: str = os.getenv("IDENTITY_PROVIDER_AUDIENCE", "")
    identity_provider_timeout: float = float(os.getenv("IDENTITY_PROVIDER_TIMEOUT", "5"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must therefore be set before this module is imported.
settings = Settings()
