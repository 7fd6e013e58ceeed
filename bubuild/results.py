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

"""Public API return types for the BU Build Toolkit.

This module defines dataclasses for return values from public API functions.
These types represent the results of operations like compiling theme.json,
stamping the theme version header and running a build pipeline.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from bubuild.theme_json import compile_theme_json
        from bubuild.results import ThemeJsonResult

        result: ThemeJsonResult = compile_theme_json(Path("."))
        print(result.status)  # "success" or "skipped"
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like Plugin or RunContext) stay co-located with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ThemeJsonResult:
    """Result from compiling theme.json.

    Attributes:
        status: "success" when theme.json was written, "skipped" when the
            theme has no src/theme-json directory.
        output_path: Path of theme.json (written only on success).
        fragments: Fragment files that contributed, in merge order.
        top_level_keys: Top-level keys of the compiled document.
    """

    status: str
    output_path: Path
    fragments: list[Path]
    top_level_keys: list[str]


@dataclass(frozen=True)
class VersionResult:
    """Result from stamping the theme header.

    Attributes:
        version: Version written into the header.
        updated: Files that were written.
        skipped: Target files that did not exist.
    """

    version: str
    updated: list[Path]
    skipped: list[Path]


@dataclass(frozen=True)
class PipelineResult:
    """Result from running a multi-step task such as build or lint.

    Attributes:
        task: Name of the task that planned the steps.
        steps: Step names in execution order.
        status: "success" when every step completed.
    """

    task: str
    steps: list[str]
    status: str
