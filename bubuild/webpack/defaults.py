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

"""Default SASS, stats and output-cleaning settings for BU themes.

These settings have been tested and refined for BU themes and plugins.
Callers should copy them before modifying; the composer never mutates them.

Note:
    sass-loader v16+ uses ``loadPaths`` (modern API) instead of
    ``includePaths`` (legacy API). The ``.`` and ``./node_modules`` entries
    keep existing ``@import 'node_modules/...'`` statements working.
"""

from __future__ import annotations

import re
from typing import Any

DEFAULT_LOAD_PATHS: list[str] = [
    ".",  # @import 'node_modules/@fortawesome/...'
    "./node_modules",  # @import '@fortawesome/...'
    "./node_modules/normalize-scss/sass",
    "./node_modules/mathsass/dist/",
    "./node_modules/@bostonuniversity",
]

DEFAULT_SASS_OPTIONS: dict[str, Any] = {
    "loadPaths": DEFAULT_LOAD_PATHS,
    "quietDeps": True,  # no warnings caused by dependencies
    "silenceDeprecations": [
        "legacy-js-api",
        "global-builtin",
        "import",
        "slash-div",
        "color-functions",
        "color-4-api",
    ],
}

# https://webpack.js.org/configuration/stats/
DEFAULT_STATS_CONFIG: dict[str, Any] = {
    "preset": "errors-warnings",
    "colors": True,
}

# Keep fonts/, images/ and blocks/ when cleaning build/
DEFAULT_CLEAN_KEEP_PATTERN = re.compile(r"^(fonts|images|blocks)/")

# Packages under this npm scope ship untranspiled sources
VENDOR_NAMESPACE = "@bostonuniversity"

OUTPUT_DIR = "build"
