"""
Pytest configuration and shared fixtures for bu-build tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from collections.abc import Iterator
import json
from pathlib import Path
import re
from typing import Any

import pytest
import yaml

from bubuild.logging import SilentLogger, get_global_logger, set_global_logger
from bubuild.webpack import Plugin


@pytest.fixture(autouse=True)
def reset_global_logger() -> Iterator[None]:
    """Restore the silent global logger after each test."""
    previous = get_global_logger()
    set_global_logger(SilentLogger())
    yield
    set_global_logger(previous)


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        path = create_yaml_file("bu-build.yaml", {"watch_interval": 2})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, sort_keys=False)
        return path

    return _create


@pytest.fixture
def sample_package_data() -> dict[str, Any]:
    """Provide a typical theme package.json."""
    return {
        "name": "responsive-child",
        "version": "2.3.1",
        "description": "A child theme of Responsive Framework",
        "repository": {
            "type": "git",
            "url": "https://github.com/bu-ist/responsive-child",
        },
        "homepage": "https://www.bu.edu",
        "scripts": {},
    }


@pytest.fixture
def theme_dir(tmp_test_dir: Path, sample_package_data: dict[str, Any]):
    """
    Factory fixture for a theme directory with a package.json.

    Usage:
        root = theme_dir(scripts={"build:theme": "node build.js"})
    """

    def _create(scripts: dict[str, str] | None = None, theme_json: bool = False) -> Path:
        package = dict(sample_package_data)
        package["scripts"] = dict(scripts or {})
        (tmp_test_dir / "package.json").write_text(json.dumps(package), encoding="utf-8")
        if theme_json:
            (tmp_test_dir / "src" / "theme-json").mkdir(parents=True, exist_ok=True)
        return tmp_test_dir

    return _create


@pytest.fixture
def sample_base_config() -> dict[str, Any]:
    """
    Provide a trimmed-down @wordpress/scripts default config.

    Holds the parts the composer touches: discovered block entry points,
    the SCSS and JS module rules, loader resolution and the default plugins.
    """
    return {
        "mode": "production",
        "entry": {
            "blocks/hero/index": "./src/blocks/hero/index.js",
            "blocks/hero/style-index": "./src/blocks/hero/style.scss",
        },
        "output": {"path": "/theme/build", "filename": "[name].js"},
        "devtool": False,
        "module": {
            "rules": [
                {
                    "test": re.compile(r"\.(j|t)sx?$"),
                    "exclude": re.compile(r"node_modules"),
                    "use": [{"loader": "babel-loader", "options": {"cacheDirectory": True}}],
                },
                {
                    "test": re.compile(r"\.(sc|sa)ss$"),
                    "use": [
                        {"loader": "mini-css-extract-plugin/loader"},
                        {
                            "loader": "css-loader",
                            "options": {"importLoaders": 1, "sourceMap": False},
                        },
                        {"loader": "postcss-loader", "options": {"sourceMap": False}},
                        {"loader": "sass-loader", "options": {"sourceMap": False}},
                    ],
                },
            ]
        },
        "resolveLoader": {"modules": ["node_modules"]},
        "stats": {"children": False},
        "plugins": [
            Plugin("DefinePlugin", {"SCRIPT_DEBUG": False}),
            Plugin("CopyWebpackPlugin", {"patterns": [{"from": "**/block.json"}]}),
            Plugin("MiniCssExtractPlugin", {"filename": "[name].css"}),
            Plugin("DependencyExtractionWebpackPlugin", {}),
        ],
    }


@pytest.fixture
def resolved_base_config(sample_base_config) -> dict[str, Any]:
    """
    Provide the base config with loaders as absolute paths.

    A real wp-scripts dump holds ``require.resolve`` results instead of
    package names, and registers the SCSS chain twice (plain and
    ``?module`` imports).
    """
    style_chain = [
        {"loader": "/t/node_modules/mini-css-extract-plugin/dist/loader.js"},
        {
            "loader": "/t/node_modules/css-loader/dist/cjs.js",
            "options": {"importLoaders": 1, "sourceMap": False},
        },
        {
            "loader": "/t/node_modules/postcss-loader/dist/cjs.js",
            "options": {"sourceMap": False},
        },
        {
            "loader": "/t/node_modules/sass-loader/dist/cjs.js",
            "options": {"sourceMap": False},
        },
    ]
    sample_base_config["module"]["rules"][1:] = [
        {"test": re.compile(r"\.(sc|sa)ss$"), "use": style_chain},
        {
            "test": re.compile(r"\.(sc|sa)ss$"),
            "resourceQuery": re.compile(r"module"),
            "use": [dict(use) for use in style_chain],
        },
    ]
    return sample_base_config
