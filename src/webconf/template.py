"""Placeholder expansion across environment variables.

Raw values may reference sibling variables with ``{{KEY}}`` placeholders:

    ```
    WEB_HOST=localhost
    WEB_PORT=3000
    WEB_URL=http://{{WEB_HOST}}:{{WEB_PORT}}
    ```

Expansion is single-pass by default: when a referenced value itself contains
a placeholder, that placeholder is copied verbatim and not resolved. Chained
references need ``max_passes`` greater than one, which re-runs substitution
until nothing known is left to resolve or the limit is reached.
"""

import logging
import re
from typing import Dict, Mapping, Set

from .exceptions import CircularTemplateError

logger = logging.getLogger(__name__)

# Pattern to match {{KEY}} - captures the key name
_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def find_placeholders(value: str) -> Set[str]:
    """Return the names referenced by placeholders in ``value``."""
    return set(_PLACEHOLDER_PATTERN.findall(value))


def _expand_once(values: Mapping[str, str], source: Mapping[str, str]) -> Dict[str, str]:
    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in source:
            return source[name]
        logger.warning(f"Placeholder '{{{{{name}}}}}' does not name a variable, using ''")
        return ""

    return {key: _PLACEHOLDER_PATTERN.sub(replacer, value) for key, value in values.items()}


def expand_templates(values: Mapping[str, str], *, max_passes: int = 1) -> Dict[str, str]:
    """Substitute ``{{KEY}}`` placeholders with the values of sibling keys.

    Substitution always reads from the values as they stood at the start of
    the pass. With the default of a single pass, a referenced value that
    contains its own placeholder is inserted unresolved.

    Args:
        values: Raw environment set
        max_passes: Upper bound on substitution passes. Values above one
            resolve chained placeholders.

    Returns:
        New mapping with placeholders substituted

    Raises:
        CircularTemplateError: If placeholders naming known keys remain after
            ``max_passes`` passes (only checked when ``max_passes > 1``)
    """
    if max_passes < 1:
        raise ValueError(f"max_passes must be at least 1, got {max_passes}")

    current = dict(values)
    for _ in range(max_passes):
        expanded = _expand_once(current, current)
        if expanded == current:
            break
        current = expanded

    # Self-referencing cycles reach a fixed point with placeholders intact.
    if max_passes > 1:
        unresolved = sorted(
            key for key, value in current.items() if find_placeholders(value) & current.keys()
        )
        if unresolved:
            raise CircularTemplateError(
                f"Placeholders still unresolved after {max_passes} passes: "
                f"{', '.join(unresolved)}",
                context={"variables": unresolved, "max_passes": max_passes},
            )

    return current
