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

"""Theme configuration loading for bu-build.

This module reads the two files a theme uses to configure the toolkit:

  - package.json (theme metadata and optional npm scripts)
  - bu-build.yaml (optional toolkit options)

bu-build.yaml is deep-merged over built-in defaults where dicts are merged
recursively and lists/scalars are replaced (last wins).

Public API:

- load_toolkit_options: Load bu-build.yaml merged over defaults
- load_theme_package: Load package.json
- theme_scripts: npm scripts defined by the theme
- webpack_options: create_config() keyword arguments

Example:
    Basic usage:

        from pathlib import Path
        from bubuild.config import load_toolkit_options, webpack_options

        options = load_toolkit_options(Path("."))
        kwargs = webpack_options(options, Path("."))

"""

from .loader import (
    load_theme_package,
    load_toolkit_options,
    theme_scripts,
    webpack_options,
)

__all__ = [
    "load_theme_package",
    "load_toolkit_options",
    "theme_scripts",
    "webpack_options",
]
