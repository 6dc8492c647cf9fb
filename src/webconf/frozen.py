"""Read-only configuration documents.

The finished configuration is deep-frozen: nested mappings become
:class:`FrozenConfig` and lists become tuples. The document holds one
deliberate cycle, ``templating.globals.config``, which points back at the
top-level object. Equality, serialization, copying and ``repr`` all detect it
and terminate.

Example:
    ```python
    config = freeze(document)
    config["ports"]["web"]
    # 3000
    config.get_path("auth.providers.google")
    # False
    config["templating"]["globals"]["config"] is config
    # True
    config.to_json()  # back-reference rendered as "<config>"
    ```
"""

import json
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Set, Tuple

from .exceptions import ImmutableConfigError

BACK_REFERENCE = "<config>"


class FrozenConfig(Mapping):
    """Immutable mapping over a configuration document."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_data", dict(data or {}))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __setitem__(self, key: str, value: Any) -> None:
        raise ImmutableConfigError(f"Configuration is read-only, cannot set '{key}'")

    def __delitem__(self, key: str) -> None:
        raise ImmutableConfigError(f"Configuration is read-only, cannot delete '{key}'")

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutableConfigError(f"Configuration is read-only, cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise ImmutableConfigError(f"Configuration is read-only, cannot delete '{name}'")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return config_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __copy__(self) -> "FrozenConfig":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "FrozenConfig":
        return self

    def __reduce__(self) -> Tuple[Any, ...]:
        # Pickle memoizes the empty instance before its state, so the
        # back-reference survives a round trip. Values must be picklable
        # themselves; the ``curl`` filter is not.
        return (FrozenConfig, (), dict(self._data))

    def __setstate__(self, state: Dict[str, Any]) -> None:
        if self._data:
            raise ImmutableConfigError("Configuration is read-only, cannot restore state")
        self._data.update(state)

    def __repr__(self) -> str:
        return f"FrozenConfig(keys={list(self._data)})"

    def get_path(self, path: str, default: Any = None) -> Any:
        """Look up a dotted path such as ``"auth.providers.google"``."""
        value: Any = self
        for part in path.split("."):
            if not isinstance(value, Mapping) or part not in value:
                return default
            value = value[part]
        return value

    def to_dict(self, back_reference: Any = BACK_REFERENCE) -> Dict[str, Any]:
        """Plain nested dicts and lists, with cycles replaced by ``back_reference``."""
        return _thaw(self, back_reference, frozenset())

    def to_json(self, indent: int | None = 2) -> str:
        """JSON text of :meth:`to_dict`; callables are rendered by name."""
        return json.dumps(self.to_dict(), indent=indent, default=_describe)


def _describe(value: Any) -> str:
    if callable(value):
        name = getattr(value, "__name__", None) or type(value).__name__
        return f"<callable {name}>"
    return str(value)


def _thaw(value: Any, back_reference: Any, ancestors: frozenset) -> Any:
    if isinstance(value, Mapping):
        if id(value) in ancestors:
            return back_reference
        inner = ancestors | {id(value)}
        return {key: _thaw(item, back_reference, inner) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(item, back_reference, ancestors) for item in value]
    return value


def _freeze(value: Any, memo: Dict[int, Any]) -> Any:
    if isinstance(value, FrozenConfig):
        return value
    if isinstance(value, Mapping):
        if id(value) in memo:
            return memo[id(value)]
        frozen = FrozenConfig()
        # Registered before the children so a back-reference resolves to it.
        memo[id(value)] = frozen
        frozen._data.update((key, _freeze(item, memo)) for key, item in value.items())
        return frozen
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item, memo) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value


def freeze(document: Mapping[str, Any]) -> FrozenConfig:
    """Deep-freeze ``document``, preserving shared references and cycles."""
    return _freeze(document, {})


def _equal(a: Any, b: Any, seen: Set[Tuple[int, int]]) -> bool:
    if a is b:
        return True
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        pair = (id(a), id(b))
        if pair in seen:
            return True
        seen.add(pair)
        if set(a.keys()) != set(b.keys()):
            return False
        return all(_equal(a[key], b[key], seen) for key in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(_equal(x, y, seen) for x, y in zip(a, b))
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        return False
    return a == b


def config_equal(a: Any, b: Any) -> bool:
    """Structural equality that terminates on cyclic documents.

    A pair of mappings already under comparison is assumed equal, so the
    back-reference cycle is walked once.
    """
    return _equal(a, b, set())
