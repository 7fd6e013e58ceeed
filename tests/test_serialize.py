"""
Tests for bubuild.webpack.serialize module.

Tests the JSON exchange with webpack including:
- Tagged regular expressions and plugins
- Loading base config dumps (JSON and YAML)
- Error handling for missing or malformed dumps
"""

from __future__ import annotations

import json
import re

import pytest

from bubuild.exceptions import ConfigError
from bubuild.webpack import Plugin, create_config, dump_configs, load_base_config
from bubuild.webpack.serialize import from_jsonable, to_jsonable

pytestmark = pytest.mark.unit


class TestTaggedValues:
    """Tests for regexp and plugin tags."""

    def test_regexp_tag_compiles_pattern(self):
        """Test that a tagged regexp becomes a compiled pattern."""
        value = from_jsonable({"__regexp__": r"\.(sc|sa)ss$", "flags": "i"})

        assert isinstance(value, re.Pattern)
        assert value.search("THEME.SCSS")

    def test_unsupported_js_flags_ignored(self):
        """Test that flags like g and u do not break compilation."""
        value = from_jsonable({"__regexp__": "a", "flags": "gu"})

        assert value.flags & re.IGNORECASE == 0

    def test_invalid_regexp_raises_config_error(self):
        """Test that a pattern that does not compile is a config error."""
        with pytest.raises(ConfigError, match="Invalid regular expression"):
            from_jsonable({"__regexp__": "(unclosed", "flags": ""})

    def test_plugin_tag(self):
        """Test that a tagged plugin becomes a Plugin."""
        value = from_jsonable(
            {"__plugin__": "CopyWebpackPlugin", "options": {"patterns": []}}
        )

        assert value == Plugin("CopyWebpackPlugin", {"patterns": []})

    def test_nested_values_converted(self):
        """Test that tags inside lists and dicts are converted."""
        value = from_jsonable(
            {"module": {"rules": [{"test": {"__regexp__": "x", "flags": ""}}]}}
        )

        assert value["module"]["rules"][0]["test"].pattern == "x"

    def test_to_jsonable_tags_patterns_and_plugins(self):
        """Test that patterns and plugins are written as tags."""
        data = {
            "test": re.compile(r"\.js$", re.IGNORECASE | re.MULTILINE),
            "plugins": (Plugin("RemoveEmptyScriptsPlugin"),),
        }

        assert to_jsonable(data) == {
            "test": {"__regexp__": r"\.js$", "flags": "im"},
            "plugins": [{"__plugin__": "RemoveEmptyScriptsPlugin", "options": {}}],
        }


class TestLoadBaseConfig:
    """Tests for loading dumped wp-scripts configs."""

    def test_load_json_dump(self, tmp_test_dir):
        """Test loading a JSON dump with tagged values."""
        path = tmp_test_dir / "webpack.base.json"
        path.write_text(
            json.dumps(
                {
                    "entry": {"blocks/a/index": "./src/blocks/a/index.js"},
                    "plugins": [{"__plugin__": "CopyWebpackPlugin", "options": {}}],
                }
            )
        )

        base = load_base_config(path)

        assert base["plugins"] == [Plugin("CopyWebpackPlugin")]

    def test_load_yaml_fixture(self, create_yaml_file):
        """Test that hand-written YAML fixtures are accepted."""
        path = create_yaml_file("base.yaml", {"mode": "development"})

        assert load_base_config(path) == {"mode": "development"}

    def test_missing_file_raises(self, tmp_test_dir):
        """Test that a missing dump raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_base_config(tmp_test_dir / "missing.json")

    def test_invalid_json_raises(self, tmp_test_dir):
        """Test that unparsable JSON raises ConfigError."""
        path = tmp_test_dir / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Failed to parse"):
            load_base_config(path)

    def test_non_mapping_raises(self, tmp_test_dir):
        """Test that a JSON array is rejected."""
        path = tmp_test_dir / "list.json"
        path.write_text("[]")

        with pytest.raises(ConfigError, match="must be a mapping"):
            load_base_config(path)


class TestDumpConfigs:
    """Tests for writing composed configs."""

    def test_dump_is_valid_json(self, sample_base_config):
        """Test that composed configs serialize to tagged JSON."""
        text = dump_configs(create_config(sample_base_config))

        data = json.loads(text)
        assert len(data) == 2
        assert data[1]["plugins"][-1] == {
            "__plugin__": "RemoveEmptyScriptsPlugin",
            "options": {},
        }
        assert data[1]["output"]["clean"]["keep"] == {
            "__regexp__": "^(fonts|images|blocks)/",
            "flags": "",
        }
