"""Tests for loader settings."""

from pathlib import Path

from webconf.settings import LoaderSettings


class TestLoaderSettings:
    """Test defaults and derived paths."""

    def test_defaults(self):
        """Test the default file layout."""
        settings = LoaderSettings()

        assert settings.base_path == Path(".env.defaults")
        assert settings.deployment_path == Path(".env")
        assert settings.schema_path == Path(".env.schema")
        assert settings.overlay_dir is None
        assert settings.max_template_passes == 1
        assert settings.strict_overlays is True

    def test_paths_are_normalized(self, temp_dir):
        """Test that string paths become Path objects."""
        settings = LoaderSettings(env_dir=str(temp_dir), overlay_dir=str(temp_dir / "overlays"))

        assert settings.env_dir == temp_dir
        assert settings.overlay_dir == temp_dir / "overlays"
        assert settings.base_path == temp_dir / ".env.defaults"


class TestFromEnviron:
    """Test reading settings from prefixed variables."""

    def test_values_are_typed(self):
        """Test coercion of flag and numeric settings."""
        settings = LoaderSettings.from_environ(
            environ={
                "WEBCONF_ENV_DIR": "/srv/app/config",
                "WEBCONF_SILENT": "true",
                "WEBCONF_MAX_TEMPLATE_PASSES": "5",
                "WEBCONF_STRICT_OVERLAYS": "false",
            }
        )

        assert settings.env_dir == Path("/srv/app/config")
        assert settings.silent is True
        assert settings.max_template_passes == 5
        assert settings.strict_overlays is False

    def test_file_names_are_not_coerced(self):
        """Test that file names stay strings even when they look numeric."""
        settings = LoaderSettings.from_environ(environ={"WEBCONF_DEPLOYMENT_FILE": "2024"})

        assert settings.deployment_file == "2024"

    def test_unrelated_variables_ignored(self):
        """Test that other variables leave defaults untouched."""
        settings = LoaderSettings.from_environ(environ={"SILENT": "true", "HOME": "/root"})

        assert settings == LoaderSettings()

    def test_custom_prefix(self):
        """Test a caller-chosen prefix."""
        settings = LoaderSettings.from_environ(
            prefix="MYAPP_", environ={"MYAPP_BASE_FILE": "defaults.env"}
        )

        assert settings.base_file == "defaults.env"

    def test_reads_process_environment(self, monkeypatch):
        """Test the os.environ default."""
        monkeypatch.setenv("WEBCONF_INCLUDE_PROCESS_ENV", "true")

        assert LoaderSettings.from_environ().include_process_env is True
