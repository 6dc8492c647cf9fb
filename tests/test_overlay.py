"""Tests for deployment overlays."""

import json

import pytest

from webconf.environments import DEFAULT_OVERLAYS, ONE_YEAR_MS, production
from webconf.exceptions import OverlayError, UnknownOverlayKeyError
from webconf.overlay import apply_environment_overlay, deep_merge, load_overlays, select_overlay


class TestDeepMerge:
    """Test the merge rule."""

    def test_nested_merge(self):
        """Test key-by-key merging of nested documents."""
        assert deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}}) == {"a": {"x": 1, "y": 3}}

    def test_lists_are_replaced(self):
        """Test that sequences are replaced, never concatenated."""
        assert deep_merge({"n": [1, 2]}, {"n": [3]}) == {"n": [3]}

    def test_scalar_replaces_mapping(self):
        """Test that a non-mapping override replaces a mapping."""
        assert deep_merge({"a": {"x": 1}}, {"a": None}) == {"a": None}

    def test_mapping_replaces_scalar(self):
        """Test that a mapping override replaces a scalar."""
        assert deep_merge({"a": 1}, {"a": {"x": 2}}) == {"a": {"x": 2}}

    def test_new_keys_added_when_not_strict(self):
        """Test that unknown keys are added by default."""
        assert deep_merge({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_inputs_not_modified(self):
        """Test that merging returns a new document."""
        base = {"a": {"x": 1}}
        override = {"a": {"x": 2}}

        deep_merge(base, override)

        assert base == {"a": {"x": 1}}
        assert override == {"a": {"x": 2}}

    def test_strict_rejects_unknown_keys(self):
        """Test strict mode names the offending path."""
        with pytest.raises(UnknownOverlayKeyError) as exc_info:
            deep_merge({"a": {"x": 1}}, {"a": {"z": 2}}, strict=True)

        assert exc_info.value.context == {"path": "a.z"}

    def test_strict_rejects_unknown_top_level_key(self):
        """Test strict mode at the top level."""
        with pytest.raises(UnknownOverlayKeyError):
            deep_merge({"a": 1}, {"b": 2}, strict=True)

    def test_strict_allows_open_sections(self):
        """Test that empty base mappings accept any key."""
        merged = deep_merge({"ssl": {"web": {}}}, {"ssl": {"web": {"cert": "c.pem"}}}, strict=True)

        assert merged == {"ssl": {"web": {"cert": "c.pem"}}}


class TestApplyEnvironmentOverlay:
    """Test overlay selection by deployment identifier."""

    def test_active_overlay_applied(self):
        """Test that the matching layer is merged."""
        base = {"a": {"x": 1, "y": 2}}

        merged = apply_environment_overlay(base, {"test": {"a": {"y": 3}}}, "test")

        assert merged == {"a": {"x": 1, "y": 3}}

    def test_missing_overlay_is_noop(self):
        """Test that no layer returns the base unchanged."""
        base = {"a": 1}

        assert apply_environment_overlay(base, {"test": {"a": 2}}, "staging") is base

    def test_exact_identifier_match(self):
        """Test that selection is exact, not prefix or case-insensitive."""
        assert select_overlay({"test": {"a": 1}}, "Test") is None
        assert select_overlay({"test": {"a": 1}}, "testing") is None

    def test_callable_layer_receives_environment(self):
        """Test that callable layers are built from the typed environment."""
        overlays = {"production": lambda env: {"a": env["DOMAIN"]}}

        merged = apply_environment_overlay({"a": "x"}, overlays, "production", env={"DOMAIN": "cdn"})

        assert merged == {"a": "cdn"}

    def test_non_mapping_layer_raises(self):
        """Test that a layer must be a mapping."""
        with pytest.raises(OverlayError):
            select_overlay({"test": lambda env: ["not", "a", "mapping"]}, "test")


class TestDefaultOverlays:
    """Test the built-in layers against an assembled base."""

    def test_builtin_layers_are_strictly_valid(self, typed_env):
        """Test that every built-in layer only names known keys."""
        from webconf.assembler import assemble_config

        base = assemble_config(typed_env)
        for identifier in DEFAULT_OVERLAYS:
            apply_environment_overlay(
                base, DEFAULT_OVERLAYS, identifier, env=typed_env, strict=True
            )

    def test_production_layer(self, typed_env):
        """Test that production serves assets through the CDN."""
        layer = production(typed_env)

        assert layer["manifest_rev"]["prepend"] == "//d111111abcdef8.cloudfront.net/"
        assert layer["serve_static"]["max_age"] == ONE_YEAR_MS


class TestLoadOverlays:
    """Test loading overlay files."""

    def test_load_yaml_and_json(self, temp_dir):
        """Test that each file becomes a layer named after its stem."""
        (temp_dir / "production.yaml").write_text(
            "serve_static:\n  max_age: 100\n", encoding="utf-8"
        )
        (temp_dir / "test.json").write_text(json.dumps({"show_stack": True}), encoding="utf-8")

        overlays = load_overlays(temp_dir)

        assert overlays == {
            "production": {"serve_static": {"max_age": 100}},
            "test": {"show_stack": True},
        }

    def test_yaml_wins_over_json(self, temp_dir):
        """Test precedence between files with the same identifier."""
        (temp_dir / "test.json").write_text('{"a": "json"}', encoding="utf-8")
        (temp_dir / "test.yaml").write_text("a: yaml\n", encoding="utf-8")

        assert load_overlays(temp_dir) == {"test": {"a": "yaml"}}

    def test_empty_file_is_empty_layer(self, temp_dir):
        """Test that an empty YAML file is an empty layer."""
        (temp_dir / "test.yaml").write_text("", encoding="utf-8")

        assert load_overlays(temp_dir) == {"test": {}}

    def test_missing_directory(self, temp_dir):
        """Test that a missing directory yields no layers."""
        assert load_overlays(temp_dir / "nope") == {}

    def test_non_mapping_file_raises(self, temp_dir):
        """Test that a list root is rejected."""
        (temp_dir / "test.yaml").write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(OverlayError):
            load_overlays(temp_dir)

    def test_invalid_yaml_raises(self, temp_dir):
        """Test that parse errors are wrapped."""
        (temp_dir / "test.yaml").write_text("a: [unclosed\n", encoding="utf-8")

        with pytest.raises(OverlayError):
            load_overlays(temp_dir)
