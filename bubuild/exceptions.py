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

"""Exception hierarchy for the BU Build Toolkit.

This module defines a small exception hierarchy that lets callers tell
configuration problems apart from failures of the external build tools:

- ConfigError: Configuration-related errors (fragment parse failures, missing
  or invalid package.json, invalid bu-build.yaml)
- ToolError: External tool errors (wp-scripts, npm, wpi18n, phpcs exiting
  non-zero or missing from the system)

All exceptions inherit from BuildToolkitError, allowing users to catch all
toolkit errors with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from bubuild.theme_json import compile_theme_json
        from bubuild.exceptions import ConfigError

        try:
            result = compile_theme_json(Path("my-theme"))
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```

    Catching all toolkit errors:
        ```python
        from bubuild.core import run_task
        from bubuild.exceptions import BuildToolkitError

        try:
            run_task("build", ctx)
        except BuildToolkitError as e:
            print(f"Build failed: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "BuildToolkitError",
    "ConfigError",
    "ToolError",
]


class BuildToolkitError(Exception):
    """Base exception for all toolkit errors.

    All toolkit-specific exceptions inherit from this class, allowing users
    to catch every toolkit error with a single except clause if needed.
    """

    pass


class ConfigError(BuildToolkitError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - theme.json source fragments (syntax errors, non-mapping documents)
    - A src/theme-json directory that holds no usable fragments
    - Missing or unparsable package.json
    - Invalid bu-build.yaml options
    - Unknown task names

    Example:
        Catching configuration errors:
            ```python
            from bubuild.exceptions import ConfigError

            try:
                options = load_toolkit_options(Path("."))
            except ConfigError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class ToolError(BuildToolkitError):
    """Raised when an external build tool fails.

    This exception is raised when there are problems with:

    - A wrapped command exiting with a non-zero status
    - A required executable (npm, npx, wpi18n, phpcs) not being installed
    - Writing build artifacts such as the theme header

    Attributes:
        exit_code: Exit status of the failed process, if one ran.
    """

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code
