# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Webpack configuration composer for BU themes and plugins.

This module extends the default @wordpress/scripts webpack configuration with
BU-specific customizations. It produces two configurations that webpack runs
one after the other:

1. **Blocks config** - handles block scripts and styles using the entry
   points that wp-scripts discovers from block.json files. Its entry points
   are never touched here.

2. **Theme config** - handles additional theme/plugin scripts and styles from
   the entry points declared by the theme. It entirely replaces the
   discovered entry points so blocks are not processed a second time, and it
   keeps the blocks/ output of the first config when cleaning build/.

Merge Rules:
    Both configs are merged onto the base with a rules table (see
    bubuild.webpack.merge): ``devtool`` and ``stats`` replace, module rules
    are paired by ``test`` and their loader chains by loader package with loader
    options merged, and loader resolution directories are prepended. The
    theme config also replaces ``entry`` and ``plugins``.

Example:
    ```python
    from bubuild.webpack import create_config, load_base_config

    base = load_base_config(Path("wp-scripts.config.json"))
    blocks, theme = create_config(
        base,
        theme_entry_points={"css/theme": "./src/scss/theme.scss"},
        load_paths=["./custom/path"],
    )
    ```

Note:
    Composition is pure. It reads no files, spawns no processes and never
    mutates ``base`` or the options, so equal inputs always give equal
    outputs. A malformed base is not validated here; webpack reports it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePath
import re
from typing import Any

from .defaults import (
    DEFAULT_CLEAN_KEEP_PATTERN,
    DEFAULT_LOAD_PATHS,
    DEFAULT_SASS_OPTIONS,
    DEFAULT_STATS_CONFIG,
    OUTPUT_DIR,
    VENDOR_NAMESPACE,
)
from .merge import MERGE, PREPEND, REPLACE, Match, merge_with_rules
from .plugins import COPY_PLUGIN, REMOVE_EMPTY_SCRIPTS_PLUGIN, Plugin

STYLE_TEST = re.compile(r"\.(sc|sa)ss$")
SCRIPT_TEST = re.compile(r"\.(js|mjs)$")

_MODULE_RULES = {
    "rules": Match("test", {"use": Match("loader", {"options": MERGE})}),
}

BLOCKS_MERGE_RULES: dict[str, Any] = {
    "devtool": REPLACE,
    "module": _MODULE_RULES,
    "resolveLoader": {"modules": PREPEND},
    "stats": REPLACE,
}

THEME_MERGE_RULES: dict[str, Any] = {
    "entry": REPLACE,
    "devtool": REPLACE,
    "module": _MODULE_RULES,
    "resolveLoader": {"modules": PREPEND},
    "stats": REPLACE,
    "plugins": REPLACE,
}


@dataclass(frozen=True)
class WebpackOptions:
    """Fully resolved options for create_webpack_config().

    Attributes:
        theme_entry_points: Output name -> source path for theme files.
        sass_compiler: SASS implementation package ("sass" or
            "sass-embedded"). None lets sass-loader auto-detect.
        stats_config: Webpack stats configuration.
        custom_sass_options: SASS options passed to sass-loader.
        theme_clean_keep_pattern: Paths under build/ kept when the theme
            config cleans its output directory.
        loader_paths: Extra directories searched for loaders, ahead of the
            base configuration's own entries.
        root: Theme/plugin directory the output path is placed under.
    """

    theme_entry_points: Mapping[str, str] = field(default_factory=dict)
    sass_compiler: str | None = None
    stats_config: Mapping[str, Any] = field(
        default_factory=lambda: dict(DEFAULT_STATS_CONFIG)
    )
    custom_sass_options: Mapping[str, Any] = field(default_factory=dict)
    theme_clean_keep_pattern: re.Pattern[str] = DEFAULT_CLEAN_KEEP_PATTERN
    loader_paths: Sequence[str] = ()
    root: str = "."


def _style_rule(options: WebpackOptions) -> dict[str, Any]:
    """Loader chain additions for .scss/.sass files."""
    sass_loader_options: dict[str, Any] = {
        "sourceMap": True,  # always, even for production
        "sassOptions": dict(options.custom_sass_options),
    }
    if options.sass_compiler:
        sass_loader_options["implementation"] = options.sass_compiler

    return {
        "test": STYLE_TEST,
        "use": [
            {"loader": "css-loader", "options": {"sourceMap": True}},
            {"loader": "sass-loader", "options": sass_loader_options},
        ],
    }


def _script_rule() -> dict[str, Any]:
    """Transpile rule for packages published untranspiled under our scope."""
    scope = re.escape(VENDOR_NAMESPACE)
    return {
        "test": SCRIPT_TEST,
        "loader": "babel-loader",
        "exclude": re.compile(rf"node_modules/(?!({scope})/).*"),
    }


def _resolve_loader(options: WebpackOptions) -> dict[str, Any]:
    return {"modules": ["node_modules", *options.loader_paths]}


def _theme_plugins(base: Mapping[str, Any]) -> list[Any]:
    """Base plugins without asset copying, ending with one empty-script remover.

    CopyWebpackPlugin would copy block.json and PHP files into the theme's
    output. RemoveEmptyScriptsPlugin must run last since it inspects the
    final set of emitted files.
    """
    kept = [
        plugin
        for plugin in base.get("plugins", [])
        if not (
            isinstance(plugin, Plugin)
            and (plugin.is_a(COPY_PLUGIN) or plugin.is_a(REMOVE_EMPTY_SCRIPTS_PLUGIN))
        )
    ]
    return [*kept, Plugin(REMOVE_EMPTY_SCRIPTS_PLUGIN)]


def create_webpack_config(
    base: Mapping[str, Any], options: WebpackOptions
) -> list[dict[str, Any]]:
    """Create the blocks and theme webpack configurations.

    Args:
        base: Default configuration from @wordpress/scripts.
        options: Resolved composer options.

    Returns:
        A two-item list: the blocks config followed by the theme config.

    Example:
        ```python
        blocks, theme = create_webpack_config(base, WebpackOptions())
        assert theme["entry"] == {}
        ```
    """
    blocks_config = {
        "devtool": "source-map",
        "resolveLoader": _resolve_loader(options),
        "module": {"rules": [_script_rule(), _style_rule(options)]},
        "stats": dict(options.stats_config),
    }

    theme_config = {
        # Keeps the blocks/ folder written by the blocks config
        "output": {
            "path": str(PurePath(options.root) / OUTPUT_DIR),
            "clean": {"keep": options.theme_clean_keep_pattern},
        },
        "entry": dict(options.theme_entry_points),
        "devtool": "source-map",
        "resolveLoader": _resolve_loader(options),
        "module": {"rules": [_style_rule(options)]},
        "stats": dict(options.stats_config),
        "plugins": _theme_plugins(base),
    }

    return [
        merge_with_rules(BLOCKS_MERGE_RULES, base, blocks_config),
        merge_with_rules(THEME_MERGE_RULES, base, theme_config),
    ]


def _compile_keep_pattern(pattern: re.Pattern[str] | str | None) -> re.Pattern[str]:
    if pattern is None:
        return DEFAULT_CLEAN_KEEP_PATTERN
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def create_config(
    base: Mapping[str, Any],
    *,
    theme_entry_points: Mapping[str, str] | None = None,
    sass_compiler: str | None = None,
    stats_config: Mapping[str, Any] | None = None,
    load_paths: Sequence[str] | None = None,
    sass_options: Mapping[str, Any] | None = None,
    theme_clean_keep_pattern: re.Pattern[str] | str | None = None,
    loader_paths: Sequence[str] | None = None,
    root: str | Path = ".",
) -> list[dict[str, Any]]:
    """Create the webpack configurations for a theme or plugin.

    Applies BU defaults to the caller's options and delegates to
    create_webpack_config().

    Args:
        base: Default configuration from @wordpress/scripts.
        theme_entry_points: Entry points for theme-specific files.
        sass_compiler: SASS compiler ("sass" or "sass-embedded"). Omitted
            from the loader options when None so sass-loader auto-detects.
        stats_config: Webpack stats configuration. Default is
            DEFAULT_STATS_CONFIG.
        load_paths: Additional SASS load paths, appended after
            DEFAULT_LOAD_PATHS.
        sass_options: Custom SASS options merged over DEFAULT_SASS_OPTIONS.
        theme_clean_keep_pattern: Regex (or regex source) for paths to keep
            when cleaning build/. Default keeps fonts/, images/ and blocks/.
        loader_paths: Extra loader resolution directories.
        root: Theme/plugin directory. Default is ".".

    Returns:
        A two-item list: the blocks config followed by the theme config.

    Raises:
        re.error: If theme_clean_keep_pattern is not a valid regex.
    """
    merged_load_paths = [*DEFAULT_LOAD_PATHS, *(load_paths or [])]
    merged_sass_options = {
        **DEFAULT_SASS_OPTIONS,
        **(sass_options or {}),
        "loadPaths": merged_load_paths,
    }

    options = WebpackOptions(
        theme_entry_points=dict(theme_entry_points or {}),
        sass_compiler=sass_compiler,
        stats_config=dict(
            stats_config if stats_config is not None else DEFAULT_STATS_CONFIG
        ),
        custom_sass_options=merged_sass_options,
        theme_clean_keep_pattern=_compile_keep_pattern(theme_clean_keep_pattern),
        loader_paths=tuple(loader_paths or ()),
        root=str(root),
    )
    return create_webpack_config(base, options)


def resolve_theme_path(relative_path: str, root: Path | None = None) -> Path:
    """Resolve a path relative to the theme/plugin root.

    Args:
        relative_path: Path relative to the theme root.
        root: Theme root. Default is the current working directory.

    Returns:
        Absolute path.
    """
    return ((root or Path.cwd()) / relative_path).resolve()
