"""Pytest configuration and fixtures for webconf tests."""

import shutil
import tempfile
from pathlib import Path

import pytest

from webconf.coercion import coerce_environment
from webconf.template import expand_templates

BASE_VALUES = {
    "APP_ENV": "development",
    "APP_NAME": "Acme",
    "WEB_PROTOCOL": "http",
    "WEB_HOST": "localhost",
    "WEB_PORT": "3000",
    "WEB_URL": "{{WEB_PROTOCOL}}://{{WEB_HOST}}:{{WEB_PORT}}",
    "API_PROTOCOL": "http",
    "API_HOST": "localhost",
    "API_PORT": "3001",
    "API_URL": "{{API_PROTOCOL}}://{{API_HOST}}:{{API_PORT}}",
    "WEB_REQUEST_TIMEOUT_MS": "10000",
    "API_REQUEST_TIMEOUT_MS": "10000",
    "CONTACT_REQUEST_MAX_LENGTH": "300",
    "COOKIES_KEY": "acme.sid",
    "SESSION_KEYS": "key-one,key-two",
    "EMAIL_DEFAULT_FROM": "support@example.com",
    "LIVERELOAD_PORT": "35729",
    "SHOW_STACK": "true",
    "GOOGLE_ANALYTICS": "UA-0000000-0",
    "MAX_AGE": "0",
    "COMMAND_FILTER_TIMEOUT_MS": "3000",
    "POSTMARK_API_TOKEN": "postmark-token",
    "DATABASE_URL": "mongodb://localhost:27017/acme",
    "DATABASE_DEBUG": "false",
    "DATABASE_RECONNECT_MS": "3000",
    "REDIS_URL": "redis://localhost:6379",
    "JOB_COLLECTION_NAME": "jobs",
    "JOB_MAX_CONCURRENCY": "20",
    "AWS_IAM_KEY": "aws-key",
    "AWS_IAM_SECRET": "aws-secret",
    "AWS_CF_DI": "E2EXAMPLE",
    "AWS_CF_DOMAIN": "d111111abcdef8.cloudfront.net",
    "AWS_S3_BUCKET": "acme-assets",
    "SENTRY_DSN": "",
    "SENTRY_BROWSER_DSN": "",
    "AUTH_LOCAL_ENABLED": "true",
    "AUTH_FACEBOOK_ENABLED": "false",
    "AUTH_TWITTER_ENABLED": "false",
    "AUTH_GOOGLE_ENABLED": "false",
    "AUTH_GITHUB_ENABLED": "false",
    "AUTH_LINKEDIN_ENABLED": "false",
    "AUTH_INSTAGRAM_ENABLED": "false",
    "AUTH_STRIPE_ENABLED": "false",
    "GOOGLE_CLIENT_ID": "google-client-id",
    "GOOGLE_CLIENT_SECRET": "google-client-secret",
    "LICENSE_KEY_CHECK_URL": "https://license.example.com/check",
}


def _write_env_file(path: Path, values: dict) -> Path:
    lines = [f"{key}={value}" for key, value in values.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def write_env_file():
    """Helper to write a KEY=value environment file."""
    return _write_env_file


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def base_values():
    """Raw values for every declared variable."""
    return dict(BASE_VALUES)


@pytest.fixture
def typed_env(base_values):
    """Expanded and coerced environment built from ``base_values``."""
    return coerce_environment(expand_templates(base_values))


@pytest.fixture
def env_dir(temp_dir, base_values):
    """Directory holding ``.env.defaults`` with every declared variable."""
    _write_env_file(temp_dir / ".env.defaults", base_values)
    return temp_dir
