"""Exception hierarchy for the webconf package.

Every exception raised by webconf extends :class:`WebconfError`, which carries
an optional context dictionary with structured error information.

Example:
    ```python
    from webconf.exceptions import MissingVariableError, WebconfError

    try:
        config = load_config()
    except MissingVariableError as e:
        logger.error(f"Missing variables: {e.variables}")
    except WebconfError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict, Iterable, List


class WebconfError(Exception):
    """Base exception for the webconf package.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence if both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ConfigurationError(WebconfError):
    """Raised when configuration sources are invalid or incomplete."""

    pass


class ValidationError(WebconfError):
    """Raised when configuration values fail validation."""

    pass


class _VariableSetError(ConfigurationError):
    """Schema mismatch naming a set of environment variables."""

    label = "variables"

    def __init__(self, variables: Iterable[str], source: str | None = None):
        self.variables: List[str] = sorted(variables)
        message = f"{self.label}: {', '.join(self.variables)}"
        if source:
            message = f"{message} (in {source})"
        context: Dict[str, Any] = {"variables": self.variables}
        if source:
            context["source"] = source
        super().__init__(message, context=context)


class MissingVariableError(_VariableSetError):
    """Raised when declared environment variables are absent from the sources."""

    label = "Missing required environment variables"


class UnexpectedVariableError(_VariableSetError):
    """Raised when loaded environment variables are not declared in the schema."""

    label = "Undeclared environment variables"


class EnvFileNotFoundError(ConfigurationError):
    """Raised when a mandatory environment-definition file does not exist."""

    pass


class CircularTemplateError(ValidationError):
    """Raised when placeholder expansion does not settle within its pass limit."""

    pass


class OverlayError(ConfigurationError):
    """Raised when a deployment overlay cannot be loaded or applied."""

    pass


class UnknownOverlayKeyError(OverlayError):
    """Raised when a strict overlay names a key the base document lacks."""

    pass


class FilterRegistrationError(WebconfError):
    """Raised when a template filter name is registered twice."""

    pass


class ImmutableConfigError(WebconfError, TypeError):
    """Raised on any attempt to modify a frozen configuration."""

    pass


__all__ = [
    "WebconfError",
    "ConfigurationError",
    "ValidationError",
    "MissingVariableError",
    "UnexpectedVariableError",
    "EnvFileNotFoundError",
    "CircularTemplateError",
    "OverlayError",
    "UnknownOverlayKeyError",
    "FilterRegistrationError",
    "ImmutableConfigError",
]
