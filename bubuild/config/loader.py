"""
Toolkit options loading for bu-build.

A theme configures the toolkit in two places:

1. **package.json** (required by the build commands)
   - Theme metadata (name, version, description, repository, homepage)
   - Optional npm scripts that switch on extra pipeline steps:
     ``build:theme``, ``build:i18n``, ``build:version``, ``watch:theme``

2. **bu-build.yaml** (optional, ``bu-build.yml`` also accepted)
   - Webpack composer options (entry points, SASS compiler, load paths...)
   - Theme header fields used by ``build:version``
   - Watch polling interval

Merge Behavior
--------------
bu-build.yaml is deep-merged over the built-in defaults with "last wins"
semantics:
  - **Dicts**: Recursively merged (keys from the theme override defaults)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

``webpack.load_paths`` is the exception in spirit only: the composer appends
it to the default SASS load paths, so the theme lists just its extra paths.

Example bu-build.yaml
---------------------
    webpack:
      theme_entry_points:
        css/theme: ./src/scss/theme.scss
        js/theme: ./src/js/theme.js
      sass_compiler: sass-embedded
      load_paths: [./custom/path]
    theme_header:
      template: responsive-framework-3x

Functions
---------
load_toolkit_options : function
    Load bu-build.yaml merged over defaults.
load_theme_package : function
    Load the theme's package.json.
theme_scripts : function
    npm scripts defined by the theme.
webpack_options : function
    Keyword arguments for bubuild.webpack.create_config().
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import yaml

from bubuild.exceptions import ConfigError
from bubuild.logging import get_global_logger

CONFIG_FILENAMES = ("bu-build.yaml", "bu-build.yml")
PACKAGE_FILENAME = "package.json"

DEFAULT_OPTIONS: dict[str, Any] = {
    "webpack": {
        "theme_entry_points": {},
        "sass_compiler": None,
        "stats_config": None,
        "load_paths": [],
        "sass_options": {},
        "theme_clean_keep_pattern": None,
        "loader_paths": [],
    },
    "theme_header": {
        "author": "Boston University Interactive Design",
        "template": "responsive-framework-3x",
    },
    "watch_interval": 1.0,
}


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - when the file is unreadable or is invalid YAML
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except OSError as err:
        raise ConfigError(f"Cannot read {p}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = v
    return result


# -------------------------------
# Validation
# -------------------------------


def _validate_options(options: dict[str, Any], source: Path) -> None:
    """Check the shape of fields the composer relies on."""
    webpack = options.get("webpack")
    if not isinstance(webpack, dict):
        raise ConfigError(f"{source}: 'webpack' must be a mapping")

    entries = webpack.get("theme_entry_points")
    if not isinstance(entries, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in entries.items()
    ):
        raise ConfigError(
            f"{source}: 'webpack.theme_entry_points' must map output names to source paths"
        )

    for key in ("load_paths", "loader_paths"):
        value = webpack.get(key)
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            raise ConfigError(f"{source}: 'webpack.{key}' must be a list of paths")

    for key in ("sass_options", "stats_config"):
        value = webpack.get(key)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(f"{source}: 'webpack.{key}' must be a mapping")

    interval = options.get("watch_interval")
    if not isinstance(interval, (int, float)) or interval <= 0:
        raise ConfigError(f"{source}: 'watch_interval' must be a positive number")


# -------------------------------
# Public API
# -------------------------------


def find_options_file(root: Path) -> Path | None:
    """Return the theme's bu-build.yaml (or .yml), if any."""
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_toolkit_options(root: Path) -> dict[str, Any]:
    """
    Load toolkit options for the theme in 'root'.

    Returns
      The built-in defaults deep-merged with bu-build.yaml. Without a
      bu-build.yaml the defaults are returned as-is (a fresh copy).

    Raises
      ConfigError on YAML parse errors, a non-mapping document, or fields
      with the wrong shape.
    """
    logger = get_global_logger()

    options = copy.deepcopy(DEFAULT_OPTIONS)
    path = find_options_file(root)
    if path is None:
        logger.verbose("CONFIG", "No bu-build.yaml found, using defaults")
        return options

    logger.verbose("CONFIG", f"Loading: {path.name}")
    data = _load_yaml_file(path)
    if data is None:
        return options
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {path}")

    unknown = sorted(set(data) - set(DEFAULT_OPTIONS))
    if unknown:
        logger.warning(f"{path.name}: ignoring unknown keys: {', '.join(unknown)}")

    options = _deep_merge_dicts(options, data)
    _validate_options(options, path)
    return options


def load_theme_package(root: Path) -> dict[str, Any]:
    """
    Load the theme's package.json.

    Raises
      ConfigError if package.json is missing, unparsable or not an object.
    """
    path = root / PACKAGE_FILENAME
    if not path.exists():
        raise ConfigError(f"{PACKAGE_FILENAME} not found in {root}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as err:
        raise ConfigError(f"Failed to parse {PACKAGE_FILENAME}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigError(f"{PACKAGE_FILENAME} must contain a JSON object")
    return data


def theme_scripts(package: dict[str, Any]) -> dict[str, str]:
    """npm scripts defined in package.json (empty when there are none)."""
    scripts = package.get("scripts")
    return scripts if isinstance(scripts, dict) else {}


def webpack_options(options: dict[str, Any], root: Path) -> dict[str, Any]:
    """Keyword arguments for bubuild.webpack.create_config()."""
    webpack = options["webpack"]
    return {
        "theme_entry_points": webpack["theme_entry_points"],
        "sass_compiler": webpack["sass_compiler"],
        "stats_config": webpack["stats_config"],
        "load_paths": webpack["load_paths"],
        "sass_options": webpack["sass_options"],
        "theme_clean_keep_pattern": webpack["theme_clean_keep_pattern"],
        "loader_paths": webpack["loader_paths"],
        "root": str(root.resolve()),
    }
