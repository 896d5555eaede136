"""Configuration helpers for environment variables."""

from __future__ import annotations

import os
import logging

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


_DEV_ENVS = {"dev", "local"}
_INSECURE_ENVS = {"dev", "local", "test", "ci"}
_DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60
_DEV_JWT_SECRET = "financy-dev-secret-change-me"


def _should_load_dotenv() -> bool:
    """Return whether local dotenv loading should run."""
    app_env = os.getenv("APP_ENV", "dev").strip().lower()
    return app_env in _DEV_ENVS


if _should_load_dotenv():
    load_dotenv()


def get_env(name: str, default: str | None = None) -> str | None:
    """Return a raw environment value or default."""
    return os.getenv(name, default)


def app_env() -> str:
    """Return the current application environment."""
    return (get_env("APP_ENV", "dev") or "dev").strip() or "dev"


def cors_allow_origins() -> list[str]:
    """Return CORS allowed origins from env with safe environment defaults."""
    raw_origins = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]

    if parsed_origins:
        return parsed_origins

    if app_env().strip().lower() in _DEV_ENVS:
        return ["http://localhost:5173", "http://127.0.0.1:5173"]

    ui_origin = (get_env("UI_ORIGIN", "") or "").strip()
    if ui_origin:
        return [ui_origin]

    logger.warning(
        "cors_allow_origins_empty_in_prod app_env=%s; define CORS_ALLOW_ORIGINS or UI_ORIGIN",
        app_env(),
    )

    return []


def jwt_secret() -> str:
    """Return the bearer token signing secret.

    Non-production environments fall back to a fixed development secret; any
    other environment must define ``AUTH_JWT_SECRET``.
    """
    secret = (get_env("AUTH_JWT_SECRET", "") or "").strip()
    if secret:
        return secret

    if app_env().strip().lower() in _INSECURE_ENVS:
        logger.warning("auth_jwt_secret_missing app_env=%s; using development secret", app_env())
        return _DEV_JWT_SECRET

    raise RuntimeError("AUTH_JWT_SECRET must be configured")


def jwt_algorithm() -> str:
    """Return the bearer token signing algorithm."""
    return (get_env("AUTH_JWT_ALGORITHM", "HS256") or "HS256").strip() or "HS256"


def token_ttl_seconds() -> int:
    """Return bearer token lifetime in seconds, defaulting to one day."""
    raw_value = (get_env("AUTH_TOKEN_TTL_SECONDS", "") or "").strip()
    if not raw_value:
        return _DEFAULT_TOKEN_TTL_SECONDS
    try:
        parsed = int(raw_value)
    except ValueError:
        logger.warning("auth_token_ttl_invalid value=%s; using default", raw_value)
        return _DEFAULT_TOKEN_TTL_SECONDS
    return parsed if parsed > 0 else _DEFAULT_TOKEN_TTL_SECONDS


def password_hash_method() -> str:
    """Return the werkzeug password hashing method."""
    return (get_env("AUTH_PASSWORD_HASH_METHOD", "scrypt") or "scrypt").strip() or "scrypt"


def supabase_url() -> str | None:
    """Return Supabase URL when configured."""
    return get_env("SUPABASE_URL")


def supabase_service_role_key() -> str | None:
    """Return Supabase service role key when configured."""
    return get_env("SUPABASE_SERVICE_ROLE_KEY")


def supabase_anon_key() -> str | None:
    """Return Supabase anon key when configured."""
    return get_env("SUPABASE_ANON_KEY")


def seed_demo_data() -> bool:
    """Return whether the API should seed the demo account at startup."""
    return (get_env("SEED_DEMO_DATA", "") or "").strip().lower() in {"1", "true", "yes"}
