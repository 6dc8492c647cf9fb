"""webconf

Layered runtime configuration for a web and API application: strict
environment files, placeholder expansion, type coercion, a nested default
document, deployment overlays and a deep-frozen result.
"""

from .coercion import coerce_environment, coerce_value
from .env_loader import EnvLoader, load_schema
from .exceptions import (
    CircularTemplateError,
    ConfigurationError,
    EnvFileNotFoundError,
    ImmutableConfigError,
    MissingVariableError,
    OverlayError,
    UnexpectedVariableError,
    UnknownOverlayKeyError,
    ValidationError,
    WebconfError,
)
from .frozen import FrozenConfig, config_equal, freeze
from .overlay import deep_merge, load_overlays
from .pipeline import ConfigPipeline, load_config
from .settings import LoaderSettings
from .template import expand_templates

__version__ = "0.1.0"
__all__ = [
    "ConfigPipeline",
    "EnvLoader",
    "FrozenConfig",
    "LoaderSettings",
    "coerce_environment",
    "coerce_value",
    "config_equal",
    "deep_merge",
    "expand_templates",
    "freeze",
    "load_config",
    "load_overlays",
    "load_schema",
    # Exceptions
    "CircularTemplateError",
    "ConfigurationError",
    "EnvFileNotFoundError",
    "ImmutableConfigError",
    "MissingVariableError",
    "OverlayError",
    "UnexpectedVariableError",
    "UnknownOverlayKeyError",
    "ValidationError",
    "WebconfError",
]
