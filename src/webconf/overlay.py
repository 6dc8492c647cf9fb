"""Deployment-environment overlays.

An overlay is a partial configuration document merged onto the assembled base
for one deployment identifier (``development``, ``test``, ``production``...).
Nested mappings merge key by key; every other value, lists included, replaces
the base value outright.

Overlay files (``config/environments/production.yaml``):
    ```yaml
    serve_static:
      max_age: 31536000
    manifest_rev:
      prepend: //d111111abcdef8.cloudfront.net/
    ```
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Tuple, Union

import yaml

from .exceptions import OverlayError, UnknownOverlayKeyError

logger = logging.getLogger(__name__)

OverlayLayer = Union[Mapping[str, Any], Callable[[Mapping[str, Any]], Mapping[str, Any]]]


def deep_merge(
    base: Mapping[str, Any],
    override: Mapping[str, Any],
    *,
    strict: bool = False,
    path: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    """Deep merge two documents.

    Recursively merges override into base, with override values taking
    precedence. Nested mappings are merged recursively; all other types,
    including lists, are replaced.

    Args:
        base: Base document (values used when not overridden)
        override: Override document (takes precedence)
        strict: Reject override keys that the base does not define. Empty
            mappings in the base (such as ``ssl.web``) are open sections and
            accept any key.
        path: Key path of ``base`` within the top-level document

    Returns:
        New merged document

    Raises:
        UnknownOverlayKeyError: If ``strict`` and the override names a key
            missing from the base

    Example:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
        >>> deep_merge({"n": [1, 2]}, {"n": [3]})
        {'n': [3]}
    """
    result = dict(base)
    open_section = strict and not base and bool(path)

    for key, value in override.items():
        key_path = (*path, key)
        if key not in result:
            if strict and not open_section:
                dotted = ".".join(key_path)
                raise UnknownOverlayKeyError(
                    f"Overlay key '{dotted}' is not defined in the base configuration",
                    context={"path": dotted},
                )
            result[key] = value
        elif isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value, strict=strict, path=key_path)
        else:
            result[key] = value

    return result


def select_overlay(
    overlays: Mapping[str, OverlayLayer],
    identifier: str,
    env: Mapping[str, Any] | None = None,
) -> Mapping[str, Any] | None:
    """Return the layer for ``identifier``, or None when there is none.

    Callable layers are called with the typed environment.

    Raises:
        OverlayError: If the layer is not a mapping
    """
    layer = overlays.get(identifier)
    if layer is None:
        return None
    if callable(layer):
        layer = layer(env or {})
    if not isinstance(layer, Mapping):
        raise OverlayError(
            f"Overlay for '{identifier}' must be a mapping, got {type(layer).__name__}",
            context={"identifier": identifier},
        )
    return layer


def apply_environment_overlay(
    base: Dict[str, Any],
    overlays: Mapping[str, OverlayLayer],
    identifier: str,
    *,
    env: Mapping[str, Any] | None = None,
    strict: bool = False,
) -> Dict[str, Any]:
    """Merge the layer for ``identifier`` onto ``base``.

    Returns ``base`` itself when no layer is defined for the identifier.
    """
    layer = select_overlay(overlays, identifier, env)
    if layer is None:
        logger.debug(f"No overlay defined for '{identifier}'")
        return base
    logger.debug(f"Applying overlay for '{identifier}' ({len(layer)} top-level keys)")
    return deep_merge(base, layer, strict=strict)


def _load_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except yaml.YAMLError as e:
        raise OverlayError(f"Failed to parse YAML overlay {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise OverlayError(f"Failed to parse JSON overlay {path}: {e}") from e
    except OSError as e:
        raise OverlayError(f"Failed to read overlay {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise OverlayError(f"Overlay file must contain a mapping: {path}")
    return data


def load_overlays(directory: str | Path) -> Dict[str, Dict[str, Any]]:
    """Load every ``<identifier>.yaml|.yml|.json`` file in ``directory``.

    When several files share an identifier, YAML wins over JSON.

    Args:
        directory: Directory of overlay files

    Returns:
        Mapping of deployment identifier to overlay document

    Raises:
        OverlayError: If a file cannot be read or parsed
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.debug(f"Overlay directory {directory} does not exist")
        return {}

    overlays: Dict[str, Dict[str, Any]] = {}
    for ext in [".json", ".yml", ".yaml"]:
        for path in sorted(directory.glob(f"*{ext}")):
            if path.is_file():
                overlays[path.stem] = _load_file(path)

    logger.debug(f"Loaded overlays from {directory}: {sorted(overlays)}")
    return overlays
