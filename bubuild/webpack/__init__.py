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

"""Webpack configuration composition for BU themes and plugins.

Public API:

- create_config: Apply BU defaults and compose the blocks and theme configs
- create_webpack_config: Compose configs from fully resolved options
- merge_with_rules: Rule-based configuration merge
- load_base_config / dump_configs: JSON exchange with webpack
- resolve_theme_path: Resolve a path against the theme root

Example:

    from pathlib import Path
    from bubuild.webpack import create_config, dump_configs, load_base_config

    base = load_base_config(Path("wp-scripts.config.json"))
    configs = create_config(base, theme_entry_points={"js/theme": "./src/js/theme.js"})
    print(dump_configs(configs))

"""

from .composer import (
    WebpackOptions,
    create_config,
    create_webpack_config,
    resolve_theme_path,
)
from .defaults import (
    DEFAULT_CLEAN_KEEP_PATTERN,
    DEFAULT_LOAD_PATHS,
    DEFAULT_SASS_OPTIONS,
    DEFAULT_STATS_CONFIG,
)
from .merge import MERGE, PREPEND, REPLACE, Match, merge_with_rules
from .plugins import Plugin
from .serialize import dump_configs, load_base_config

__all__ = [
    "DEFAULT_CLEAN_KEEP_PATTERN",
    "DEFAULT_LOAD_PATHS",
    "DEFAULT_SASS_OPTIONS",
    "DEFAULT_STATS_CONFIG",
    "MERGE",
    "PREPEND",
    "REPLACE",
    "Match",
    "Plugin",
    "WebpackOptions",
    "create_config",
    "create_webpack_config",
    "dump_configs",
    "load_base_config",
    "merge_with_rules",
    "resolve_theme_path",
]
