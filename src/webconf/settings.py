"""Loader settings read from ``WEBCONF_*`` process variables.

These settings describe where the pipeline finds its sources, not the
application configuration itself.

Environment variable format:
    <PREFIX><FIELD NAME IN UPPER CASE>

Examples:
    - WEBCONF_ENV_DIR=/srv/app/config -> env_dir
    - WEBCONF_SILENT=true -> silent
    - WEBCONF_MAX_TEMPLATE_PASSES=5 -> max_template_passes
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping

from .coercion import coerce_value

logger = logging.getLogger(__name__)


@dataclass
class LoaderSettings:
    """Where and how the pipeline loads its sources.

    Attributes:
        env_dir: Directory holding the environment-definition files
        base_file: Mandatory base definitions file name
        deployment_file: Optional deployment-specific file name
        schema_file: Schema file name; the built-in schema is used when the
            file does not exist
        overlay_dir: Optional directory of ``<identifier>.yaml`` overlay files
        silent: Suppress informational logging
        include_process_env: Let process variables override file values
        max_template_passes: Placeholder expansion pass limit
        strict_overlays: Reject overlay keys unknown to the base document
    """

    env_dir: Path = Path(".")
    base_file: str = ".env.defaults"
    deployment_file: str = ".env"
    schema_file: str = ".env.schema"
    overlay_dir: Path | None = None
    silent: bool = False
    include_process_env: bool = False
    max_template_passes: int = 1
    strict_overlays: bool = True

    ENV_PREFIX = "WEBCONF_"

    def __post_init__(self) -> None:
        self.env_dir = Path(self.env_dir)
        if self.overlay_dir is not None:
            self.overlay_dir = Path(self.overlay_dir)

    @property
    def base_path(self) -> Path:
        return self.env_dir / self.base_file

    @property
    def deployment_path(self) -> Path:
        return self.env_dir / self.deployment_file

    @property
    def schema_path(self) -> Path:
        return self.env_dir / self.schema_file

    @classmethod
    def from_environ(
        cls,
        prefix: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "LoaderSettings":
        """Build settings from prefixed process variables.

        Args:
            prefix: Variable prefix (default: WEBCONF_)
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Settings with every unset field at its default
        """
        prefix = prefix or cls.ENV_PREFIX
        environ = os.environ if environ is None else environ

        kwargs: Dict[str, Any] = {}
        for settings_field in fields(cls):
            key = f"{prefix}{settings_field.name.upper()}"
            if key not in environ:
                continue
            raw = environ[key]
            if settings_field.name in ("env_dir", "overlay_dir", "base_file",
                                       "deployment_file", "schema_file"):
                kwargs[settings_field.name] = raw
            else:
                kwargs[settings_field.name] = coerce_value(raw)
            logger.debug(f"Loader setting {settings_field.name} from {key}")

        return cls(**kwargs)
