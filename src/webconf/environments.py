"""Built-in overlays for the standard deployment identifiers."""

from typing import Any, Dict, Mapping

ONE_YEAR_MS = 1000 * 60 * 60 * 24 * 365


def production(env: Mapping[str, Any]) -> Dict[str, Any]:
    """Serve fingerprinted assets through the CDN and cache them for a year."""
    return {
        "manifest_rev": {"prepend": f"//{env.get('AWS_CF_DOMAIN', '')}/"},
        "serve_static": {"max_age": ONE_YEAR_MS},
        "show_stack": False,
    }


DEFAULT_OVERLAYS: Dict[str, Any] = {
    "development": {
        "show_stack": True,
        "templating": {"no_cache": True},
    },
    "test": {
        "jobs": {"max_concurrency": 1},
        "show_stack": True,
        "templating": {"no_cache": True},
    },
    "production": production,
}
