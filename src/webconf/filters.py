"""Template filter capabilities.

Filters are plain callables taking the filtered value as their first argument,
the calling convention Jinja2 uses. Three are provided:

- ``json``: pretty-prints a value as JSON
- ``emoji``: translates a short name such as ``smile`` or ``:+1:`` to its glyph
- ``curl``: runs a shell command and renders its output (async)

None of them raise on bad input. A filter failure becomes a string so that a
page always renders.

Example:
    ```python
    registry = default_filters(timeout_ms=5000)
    env = jinja2.Environment(enable_async=True)
    env.filters.update(registry.as_dict())
    ```
"""

import asyncio
import functools
import json
import logging
import os
import signal
from typing import Any, Awaitable, Callable, Dict, List, Union

import emoji

from .exceptions import FilterRegistrationError

logger = logging.getLogger(__name__)

Filter = Callable[[Any], Union[str, Awaitable[str]]]

# Seconds to wait for a killed process group to be reaped.
_REAP_TIMEOUT_S = 1.0


def json_filter(value: Any) -> str:
    """Serialize ``value`` as indented JSON."""
    return json.dumps(value, indent=2, default=str)


@functools.lru_cache(maxsize=1)
def _emoji_names() -> Dict[str, str]:
    names: Dict[str, str] = {}
    for glyph, data in emoji.EMOJI_DATA.items():
        for alias in [data.get("en", ""), *data.get("alias", [])]:
            name = alias.strip(":")
            if name:
                names.setdefault(name, glyph)
    return names


def emoji_filter(name: Any) -> str:
    """Translate an emoji short name to its glyph.

    Returns an empty string for unknown names and non-string input.
    """
    if not isinstance(name, str):
        return ""
    return _emoji_names().get(name.strip().strip(":"), "")


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    # The shell runs in its own session, so its process group holds every
    # command it started.
    try:
        if hasattr(os, "killpg"):
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        logger.debug(f"Command process {process.pid} already exited")


async def run_command(command: Any, timeout_ms: int) -> str:
    """Run a shell command and resolve to its output.

    The command runs as a subprocess bounded by ``timeout_ms``. On success
    this resolves to stdout. On failure it resolves to the best available
    text: stderr for a non-zero exit, otherwise a message describing the
    failure. On timeout the whole process group is killed. Only cancellation
    of the awaiting task propagates.

    Args:
        command: Shell command line
        timeout_ms: Milliseconds before the process group is killed

    Returns:
        Command output or a failure message
    """
    if not isinstance(command, str):
        logger.warning(f"Command filter received {type(command).__name__}, not a command")
        return f"Command must be a string, got {type(command).__name__}"

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except (OSError, ValueError) as e:
        logger.warning(f"Command filter could not start '{command}': {e}")
        return str(e) or f"Command could not be started: {command}"

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(), timeout=timeout_ms / 1000
        )
    except asyncio.TimeoutError:
        _kill_process_group(process)
        try:
            await asyncio.wait_for(process.wait(), timeout=_REAP_TIMEOUT_S)
        except asyncio.TimeoutError:
            logger.warning(f"Command process {process.pid} not reaped after kill")
        logger.warning(f"Command filter timed out after {timeout_ms}ms: '{command}'")
        return f"Command timed out after {timeout_ms}ms: {command}"
    except OSError as e:
        logger.warning(f"Command filter failed for '{command}': {e}")
        return str(e) or f"Command failed: {command}"

    if process.returncode != 0:
        error_output = stderr.decode("utf-8", errors="replace")
        logger.warning(
            f"Command filter exited with code {process.returncode}: '{command}'"
        )
        if error_output:
            return error_output
        return f"Command failed with exit code {process.returncode}: {command}"

    return stdout.decode("utf-8", errors="replace")


@functools.lru_cache(maxsize=None)
def command_filter(timeout_ms: int) -> Callable[[Any], Awaitable[str]]:
    """The ``curl`` filter: :func:`run_command` bound to ``timeout_ms``.

    The filter is a coroutine function, so an async Jinja2 environment awaits
    it at render time instead of evaluating it while compiling. Filters for
    the same timeout are the same object.
    """

    async def curl(command: Any) -> str:
        return await run_command(command, timeout_ms)

    return curl


class FilterRegistry:
    """Named template filters.

    Attributes:
        name: Registry name used in error messages
    """

    def __init__(self, name: str = "filters") -> None:
        self._name = name
        self._filters: Dict[str, Filter] = {}

    @property
    def name(self) -> str:
        return self._name

    def register(self, key: str, item: Filter, allow_overwrite: bool = False) -> None:
        """Register a filter by name.

        Raises:
            FilterRegistrationError: If the name is taken and
                ``allow_overwrite`` is False
        """
        if not allow_overwrite and key in self._filters:
            raise FilterRegistrationError(
                f"Filter '{key}' already registered in {self._name}",
                context={"key": key, "registry": self._name},
            )
        self._filters[key] = item

    def get(self, key: str) -> Filter:
        return self._filters[key]

    def __contains__(self, key: object) -> bool:
        return key in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def names(self) -> List[str]:
        return list(self._filters)

    def as_dict(self) -> Dict[str, Filter]:
        return dict(self._filters)


def default_filters(timeout_ms: int) -> FilterRegistry:
    """Registry holding the ``json``, ``emoji`` and ``curl`` filters."""
    registry = FilterRegistry("templating.filters")
    registry.register("json", json_filter)
    registry.register("emoji", emoji_filter)
    registry.register("curl", command_filter(timeout_ms))
    return registry
