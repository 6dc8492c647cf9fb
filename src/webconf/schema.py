"""Declared environment variables and deployment identifiers."""

# Variables every deployment must define, no more and no less.
REQUIRED_VARIABLES = (
    "APP_ENV",
    "APP_NAME",
    # servers
    "WEB_PROTOCOL",
    "WEB_HOST",
    "WEB_PORT",
    "WEB_URL",
    "API_PROTOCOL",
    "API_HOST",
    "API_PORT",
    "API_URL",
    # app
    "WEB_REQUEST_TIMEOUT_MS",
    "API_REQUEST_TIMEOUT_MS",
    "CONTACT_REQUEST_MAX_LENGTH",
    "COOKIES_KEY",
    "SESSION_KEYS",
    "EMAIL_DEFAULT_FROM",
    "LIVERELOAD_PORT",
    "SHOW_STACK",
    "GOOGLE_ANALYTICS",
    "MAX_AGE",
    "COMMAND_FILTER_TIMEOUT_MS",
    # mail
    "POSTMARK_API_TOKEN",
    # storage and messaging
    "DATABASE_URL",
    "DATABASE_DEBUG",
    "DATABASE_RECONNECT_MS",
    "REDIS_URL",
    "JOB_COLLECTION_NAME",
    "JOB_MAX_CONCURRENCY",
    "AWS_IAM_KEY",
    "AWS_IAM_SECRET",
    "AWS_CF_DI",
    "AWS_CF_DOMAIN",
    "AWS_S3_BUCKET",
    # error tracking
    "SENTRY_DSN",
    "SENTRY_BROWSER_DSN",
    # authentication
    "AUTH_LOCAL_ENABLED",
    "AUTH_FACEBOOK_ENABLED",
    "AUTH_TWITTER_ENABLED",
    "AUTH_GOOGLE_ENABLED",
    "AUTH_GITHUB_ENABLED",
    "AUTH_LINKEDIN_ENABLED",
    "AUTH_INSTAGRAM_ENABLED",
    "AUTH_STRIPE_ENABLED",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "LICENSE_KEY_CHECK_URL",
)

# Third-party identity and payment providers, in display order.
PROVIDERS = (
    "facebook",
    "twitter",
    "google",
    "github",
    "linkedin",
    "instagram",
    "stripe",
)

DEVELOPMENT_ENVIRONMENTS = frozenset({"development"})
PRODUCTION_LIKE_ENVIRONMENTS = frozenset({"production", "staging"})


def provider_variable(provider: str) -> str:
    """Name of the variable that enables ``provider``."""
    return f"AUTH_{provider.upper()}_ENABLED"
