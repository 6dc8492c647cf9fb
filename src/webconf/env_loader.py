"""Strict loading of environment-definition files.

Values are read from a mandatory base file (``.env.defaults``) and an optional
deployment file (``.env``) whose values take precedence. The merged key set
must match the declared schema exactly: every declared variable present and
nothing else.

Example:
    ```python
    loader = EnvLoader(load_schema("config/.env.schema"))
    raw = loader.load("config/.env.defaults", "config/.env")
    ```
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Tuple

from dotenv import dotenv_values

from .exceptions import EnvFileNotFoundError, MissingVariableError, UnexpectedVariableError
from .schema import REQUIRED_VARIABLES

logger = logging.getLogger(__name__)


def _read_env_file(path: Path) -> Dict[str, str]:
    # Bare keys (``KEY`` with no ``=``) come back as None.
    values = dotenv_values(path, interpolate=False)
    return {key: "" if value is None else value for key, value in values.items()}


def load_schema(path: str | Path) -> Tuple[str, ...]:
    """Read declared variable names from a schema file.

    The schema uses the same ``KEY=value`` format as the other sources; only
    the keys matter.

    Args:
        path: Path to the schema file

    Returns:
        Declared variable names in file order

    Raises:
        EnvFileNotFoundError: If the schema file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise EnvFileNotFoundError(
            f"Environment schema file not found: {path}", context={"path": str(path)}
        )
    return tuple(_read_env_file(path))


def validate(values: Mapping[str, str], schema: Iterable[str], source: str | None = None) -> None:
    """Check that ``values`` defines exactly the variables in ``schema``.

    Every violation of a kind is reported at once. Missing variables are
    checked before undeclared ones.

    Raises:
        MissingVariableError: If any declared variable is absent
        UnexpectedVariableError: If any loaded variable is undeclared
    """
    declared = set(schema)
    missing = declared - values.keys()
    if missing:
        raise MissingVariableError(missing, source)
    extra = values.keys() - declared
    if extra:
        raise UnexpectedVariableError(extra, source)


class EnvLoader:
    """Loads raw environment values and enforces the declared schema.

    Attributes:
        schema: Declared variable names
        silent: Suppress informational logging (validation still raises)
        include_process_env: Let process environment values override file
            values for declared variables
    """

    def __init__(
        self,
        schema: Iterable[str] | None = None,
        *,
        silent: bool = False,
        include_process_env: bool = False,
    ) -> None:
        self.schema: Tuple[str, ...] = tuple(schema) if schema is not None else REQUIRED_VARIABLES
        self.silent = silent
        self.include_process_env = include_process_env

    def _info(self, message: str) -> None:
        if not self.silent:
            logger.info(message)

    def load(
        self,
        base_path: str | Path,
        deployment_path: str | Path | None = None,
    ) -> Dict[str, str]:
        """Load and validate the raw environment set.

        Args:
            base_path: Mandatory base definitions file
            deployment_path: Optional deployment-specific file

        Returns:
            Mapping of variable names to raw string values

        Raises:
            EnvFileNotFoundError: If the base file does not exist
            MissingVariableError: If declared variables are absent
            UnexpectedVariableError: If undeclared variables are present
        """
        base_path = Path(base_path)
        if not base_path.is_file():
            raise EnvFileNotFoundError(
                f"Environment definitions file not found: {base_path}",
                context={"path": str(base_path)},
            )

        values = _read_env_file(base_path)
        self._info(f"Loaded {len(values)} variables from {base_path}")
        sources = [str(base_path)]

        if deployment_path is not None:
            deployment_path = Path(deployment_path)
            if deployment_path.is_file():
                overrides = _read_env_file(deployment_path)
                values.update(overrides)
                sources.append(str(deployment_path))
                self._info(f"Loaded {len(overrides)} variables from {deployment_path}")
            else:
                logger.debug(f"No deployment environment file at {deployment_path}")

        if self.include_process_env:
            for key in self.schema:
                if key in os.environ:
                    values[key] = os.environ[key]

        validate(values, self.schema, source=", ".join(sources))
        return values
