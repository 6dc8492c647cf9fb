"""Jinja2 integration for a finished configuration.

The templating engine itself is an external collaborator; this module only
wires the configuration into it: filters from ``templating.filters``, globals
from ``templating.globals`` and per-render context built on demand.

Example:
    ```python
    env = build_environment(config)
    template = env.from_string("{{ 'thumbsup' | emoji }} {{ version }}")
    html = await template.render_async(**build_render_context(config, user=user))
    ```
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping

from jinja2 import BaseLoader, Environment, FileSystemLoader

logger = logging.getLogger(__name__)


def build_environment(config: Mapping[str, Any], *, loader: BaseLoader | None = None) -> Environment:
    """Create an async Jinja2 environment configured from ``config``.

    Args:
        config: Finished configuration
        loader: Template loader. Defaults to a filesystem loader on
            ``views_dir`` when that directory exists.

    Returns:
        Jinja2 environment with filters and globals registered
    """
    templating = config["templating"]

    if loader is None:
        views_dir = Path(config["views_dir"])
        if views_dir.is_dir():
            loader = FileSystemLoader(str(views_dir))
        else:
            logger.debug(f"Views directory {views_dir} not found, no template loader set")

    # Async mode lets filters such as ``curl`` return awaitables.
    env = Environment(
        loader=loader,
        autoescape=bool(templating["autoescape"]),
        cache_size=0 if templating["no_cache"] else 400,
        enable_async=True,
    )

    for name, template_filter in templating["filters"].items():
        env.filters[name] = template_filter
    env.globals.update(templating["globals"])

    logger.debug(f"Registered template filters: {sorted(templating['filters'])}")
    return env


def build_render_context(config: Mapping[str, Any], **data: Any) -> Dict[str, Any]:
    """Context for one render: the configuration, its version and request data.

    The returned dict is new on every call and is never stored in the
    configuration.
    """
    context: Dict[str, Any] = {
        "config": config,
        "version": config["templating"]["globals"]["version"],
    }
    context.update(data)
    return context
