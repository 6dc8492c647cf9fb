"""Assembly of the base configuration document.

Typed environment values are mapped onto their configuration paths and
combined with static literals: time intervals, path conventions, password
hashing parameters, provider options and rate limits. The result is a plain
nested dict that the overlay and derived-field stages refine before it is
frozen.
"""

import logging
import os
import socket
import sys
from pathlib import Path
from typing import Any, Dict, Mapping

from .exceptions import MissingVariableError
from .filters import default_filters
from .passwords import PasswordValidator
from .schema import (
    DEVELOPMENT_ENVIRONMENTS,
    PRODUCTION_LIKE_ENVIRONMENTS,
    PROVIDERS,
    REQUIRED_VARIABLES,
    provider_variable,
)

logger = logging.getLogger(__name__)

UPDATE_CHECK_INTERVAL_MS = 1000 * 60 * 60 * 24
RATE_LIMIT_DURATION_MS = 60000
UNLIMITED_ATTEMPTS = sys.maxsize

OMIT_COMMON_FIELDS = ["_id", "__v"]
OMIT_USER_FIELDS = [
    *OMIT_COMMON_FIELDS,
    "email",
    "api_token",
    "group",
    "attempts",
    "last",
    "hash",
    "salt",
    "google_profile_id",
    "google_access_token",
    "google_refresh_token",
]

GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]


def is_production_like(env_name: str) -> bool:
    return env_name in PRODUCTION_LIKE_ENVIRONMENTS


def is_development_like(env_name: str) -> bool:
    return env_name in DEVELOPMENT_ENVIRONMENTS


def process_identity() -> str:
    """Identity used to register this process with the job scheduler."""
    return f"{socket.gethostname()}_{os.getpid()}"


def client_address(request: Any) -> Any:
    """Rate-limit key: the client address of a request."""
    return getattr(request, "ip", None)


def _local_strategy(env_name: str) -> Dict[str, Any]:
    return {
        "username_field": "email",
        "password_field": "password",
        "username_lower_case": True,
        "limit_attempts": True,
        "max_attempts": 5 if is_production_like(env_name) else UNLIMITED_ATTEMPTS,
        "digest_algorithm": "sha256",
        "encoding": "hex",
        "salt_length": 32,
        "iterations": 25000,
        "key_length": 512,
        "password_validator": PasswordValidator(bypass=is_development_like(env_name)),
    }


def _auth(env: Mapping[str, Any]) -> Dict[str, Any]:
    env_name = env["APP_ENV"]
    strategies: Dict[str, Dict[str, Any]] = {"local": _local_strategy(env_name)}
    for provider in PROVIDERS:
        strategies[provider] = {}
    strategies["google"] = {
        "client_id": env["GOOGLE_CLIENT_ID"],
        "client_secret": env["GOOGLE_CLIENT_SECRET"],
        "callback_url": f"{env['WEB_URL']}/auth/google/ok",
    }

    return {
        "local": env["AUTH_LOCAL_ENABLED"],
        "providers": {provider: env[provider_variable(provider)] for provider in PROVIDERS},
        "strategies": strategies,
        "callback_opts": {
            "success_return_to_or_redirect": "/",
            "failure_redirect": "/login",
            "success_flash": True,
            "failure_flash": True,
        },
        "google": {
            "access_type": "offline",
            "approval_prompt": "force",
            "scope": list(GOOGLE_SCOPES),
        },
    }


def assemble_config(
    env: Mapping[str, Any],
    *,
    root_dir: str | Path | None = None,
    version: str | None = None,
) -> Dict[str, Any]:
    """Build the base configuration document.

    Args:
        env: Typed environment
        root_dir: Application root for path conventions (default: cwd)
        version: Application version exposed to templates (default: the
            package version)

    Returns:
        Base configuration document

    Raises:
        MissingVariableError: If ``env`` lacks a variable mapped here
    """
    missing = set(REQUIRED_VARIABLES) - env.keys()
    if missing:
        raise MissingVariableError(missing, "typed environment")

    if version is None:
        from . import __version__ as version

    root = Path(root_dir) if root_dir is not None else Path.cwd()
    env_name = env["APP_ENV"]
    production_like = is_production_like(env_name)

    config: Dict[str, Any] = {
        "update_check_interval_ms": UPDATE_CHECK_INTERVAL_MS,
        # server
        "env": env_name,
        "app_name": env["APP_NAME"],
        "protocols": {"web": env["WEB_PROTOCOL"], "api": env["API_PROTOCOL"]},
        "ports": {"web": env["WEB_PORT"], "api": env["API_PORT"]},
        "hosts": {"web": env["WEB_HOST"], "api": env["API_HOST"]},
        "urls": {"web": env["WEB_URL"], "api": env["API_URL"]},
        "ssl": {"web": {}, "api": {}},
        # app
        "web_request_timeout_ms": env["WEB_REQUEST_TIMEOUT_MS"],
        "api_request_timeout_ms": env["API_REQUEST_TIMEOUT_MS"],
        "contact_request_max_length": env["CONTACT_REQUEST_MAX_LENGTH"],
        "cookies_key": env["COOKIES_KEY"],
        "session_keys": env["SESSION_KEYS"],
        "email": {"from": env["EMAIL_DEFAULT_FROM"], "attachments": [], "headers": {}},
        "livereload": {"port": env["LIVERELOAD_PORT"]},
        "show_stack": env["SHOW_STACK"],
        "google_analytics": env["GOOGLE_ANALYTICS"],
        "rate_limit": {
            "duration_ms": RATE_LIMIT_DURATION_MS,
            "max": 100 if production_like else 1000,
            "id": client_address,
        },
        "manifest_rev": {
            "manifest": str(root / "build" / "rev-manifest.json"),
            "prepend": "/",
        },
        "app_favicon": str(root / "assets" / "img" / "favicon.ico"),
        "serve_static": {"max_age": env["MAX_AGE"]},
        # mail
        "postmark": {
            "service": "postmark",
            "auth": {"user": env["POSTMARK_API_TOKEN"], "pass": env["POSTMARK_API_TOKEN"]},
        },
        # storage
        "database": {
            "url": env["DATABASE_URL"],
            "debug": env["DATABASE_DEBUG"],
            "reconnect_ms": env["DATABASE_RECONNECT_MS"],
            "options": {"reconnect_tries": sys.maxsize},
        },
        "omit_common_fields": list(OMIT_COMMON_FIELDS),
        "omit_user_fields": list(OMIT_USER_FIELDS),
        "redis": env["REDIS_URL"],
        "aws": {
            "key": env["AWS_IAM_KEY"],
            "access_key_id": env["AWS_IAM_KEY"],
            "secret": env["AWS_IAM_SECRET"],
            "secret_access_key": env["AWS_IAM_SECRET"],
            "distribution_id": env["AWS_CF_DI"],
            "domain_name": env["AWS_CF_DOMAIN"],
            "params": {"Bucket": env["AWS_S3_BUCKET"]},
        },
        # localization
        "locales_directory": str(root / "locales"),
        # job scheduling
        "jobs": {
            "name": process_identity(),
            "collection": env["JOB_COLLECTION_NAME"],
            "max_concurrency": env["JOB_MAX_CONCURRENCY"],
        },
        # error tracking
        "sentry": {"dsn": env["SENTRY_DSN"], "browser_dsn": env["SENTRY_BROWSER_DSN"]},
        # templating
        "build_dir": str(root / "build"),
        "views_dir": str(root / "app" / "views"),
        "templating": {
            "extname": "html",
            "autoescape": True,
            "no_cache": not production_like,
            "filters": default_filters(env["COMMAND_FILTER_TIMEOUT_MS"]).as_dict(),
            "globals": {"version": version},
        },
        "csrf": {},
        "auth": _auth(env),
        "license_key_check_url": env["LICENSE_KEY_CHECK_URL"],
    }

    logger.debug(f"Assembled base configuration for '{env_name}' with {len(config)} sections")
    return config
