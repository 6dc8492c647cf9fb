"""The configuration pipeline.

Every stage runs once, in order, at process startup:

    load → expand → coerce → assemble → overlay → derive → freeze

Example:
    ```python
    from webconf import LoaderSettings, load_config

    config = load_config(LoaderSettings(env_dir="config"))
    server.start(config)
    ```
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

from .assembler import assemble_config
from .coercion import coerce_environment
from .derived import compute_derived_fields
from .env_loader import EnvLoader, load_schema
from .environments import DEFAULT_OVERLAYS
from .frozen import FrozenConfig, freeze
from .overlay import OverlayLayer, apply_environment_overlay, deep_merge, load_overlays
from .settings import LoaderSettings
from .template import expand_templates

logger = logging.getLogger(__name__)


class ConfigPipeline:
    """Runs the configuration stages with one set of inputs.

    Attributes:
        settings: Loader settings
        schema: Declared variable names
        overlays: Overlay layers by deployment identifier
        root_dir: Application root for path conventions
        version: Application version exposed to templates
    """

    def __init__(
        self,
        settings: LoaderSettings | None = None,
        *,
        schema: Iterable[str] | None = None,
        overlays: Mapping[str, OverlayLayer] | None = None,
        root_dir: str | Path | None = None,
        version: str | None = None,
    ) -> None:
        self.settings = settings or LoaderSettings.from_environ()

        if schema is None and self.settings.schema_path.is_file():
            schema = load_schema(self.settings.schema_path)
        self.schema = tuple(schema) if schema is not None else None

        layers: Dict[str, OverlayLayer] = dict(DEFAULT_OVERLAYS if overlays is None else overlays)
        if self.settings.overlay_dir is not None:
            for identifier, layer in load_overlays(self.settings.overlay_dir).items():
                if identifier in layers and not callable(layers[identifier]):
                    layers[identifier] = deep_merge(layers[identifier], layer)
                else:
                    layers[identifier] = layer
        self.overlays = layers

        self.root_dir = root_dir
        self.version = version

    def _info(self, message: str) -> None:
        if not self.settings.silent:
            logger.info(message)

    def load_raw(self) -> Dict[str, str]:
        loader = EnvLoader(
            self.schema,
            silent=self.settings.silent,
            include_process_env=self.settings.include_process_env,
        )
        return loader.load(self.settings.base_path, self.settings.deployment_path)

    def expand(self, raw: Mapping[str, str]) -> Dict[str, str]:
        return expand_templates(raw, max_passes=self.settings.max_template_passes)

    def assemble(self, env: Mapping[str, Any]) -> Dict[str, Any]:
        return assemble_config(env, root_dir=self.root_dir, version=self.version)

    def overlay(self, base: Dict[str, Any], env: Mapping[str, Any]) -> Dict[str, Any]:
        return apply_environment_overlay(
            base,
            self.overlays,
            env["APP_ENV"],
            env=env,
            strict=self.settings.strict_overlays,
        )

    def run(self) -> FrozenConfig:
        """Run every stage and return the frozen configuration."""
        raw = self.load_raw()
        env = coerce_environment(self.expand(raw))
        self._info(f"Validated {len(env)} environment variables for '{env['APP_ENV']}'")

        document = self.overlay(self.assemble(env), env)
        config = freeze(compute_derived_fields(document))
        self._info(f"Configuration ready for '{config['env']}'")
        return config


def load_config(
    settings: LoaderSettings | None = None,
    *,
    schema: Iterable[str] | None = None,
    overlays: Mapping[str, OverlayLayer] | None = None,
    root_dir: str | Path | None = None,
    version: str | None = None,
) -> FrozenConfig:
    """Build the finished configuration.

    Args:
        settings: Loader settings (default: read from ``WEBCONF_*`` variables)
        schema: Declared variable names (default: the schema file in
            ``settings.env_dir`` if present, else the built-in schema)
        overlays: Overlay layers by deployment identifier (default: the
            built-in layers)
        root_dir: Application root for path conventions (default: cwd)
        version: Application version exposed to templates

    Returns:
        Frozen configuration

    Raises:
        EnvFileNotFoundError: If the base environment file is missing
        MissingVariableError: If declared variables are missing
        UnexpectedVariableError: If undeclared variables are present
        CircularTemplateError: If chained placeholders do not settle
        UnknownOverlayKeyError: If a strict overlay names an unknown key
    """
    return ConfigPipeline(
        settings,
        schema=schema,
        overlays=overlays,
        root_dir=root_dir,
        version=version,
    ).run()
