"""Fields computed after the overlay merge."""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def compute_derived_fields(config: Dict[str, Any]) -> Dict[str, Any]:
    """Add the fields that depend on the merged document.

    - ``templating.globals.config`` refers back to ``config`` itself, so
      templates can read any configuration value. This is a deliberate
      one-level cycle.
    - ``auth.has_third_party_providers`` is True when any provider in
      ``auth.providers`` is enabled.

    Args:
        config: Merged configuration document (modified in place)

    Returns:
        The same document
    """
    config["templating"]["globals"]["config"] = config

    providers = config["auth"]["providers"]
    config["auth"]["has_third_party_providers"] = any(bool(enabled) for enabled in providers.values())

    logger.debug(
        f"Third-party providers enabled: "
        f"{[name for name, enabled in providers.items() if enabled] or 'none'}"
    )
    return config
