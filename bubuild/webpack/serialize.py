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

"""Exchange format between webpack configs and Python objects.

Configurations cross the process boundary as JSON files. ``bu-build config``
reads a JSON dump of the @wordpress/scripts default configuration
(``webpack.base.json`` unless a path is given) and prints or writes the two
composed configurations in the same format. Producing the dump and turning
the composed JSON back into webpack objects is up to the theme's own
webpack.config.js. JSON has no regular expressions or class instances, so
two tagged objects stand in for them:

    {"__regexp__": "\\\\.(sc|sa)ss$", "flags": ""}      -> re.Pattern
    {"__plugin__": "CopyWebpackPlugin", "options": {}}  -> Plugin

JavaScript flags i, m and s map to re.IGNORECASE, re.MULTILINE and
re.DOTALL. Other JavaScript flags have no effect on matching here and are
dropped.
"""

from __future__ import annotations

import json
from pathlib import Path
import re
from typing import Any

import yaml

from bubuild.exceptions import ConfigError

from .plugins import Plugin

REGEXP_TAG = "__regexp__"
PLUGIN_TAG = "__plugin__"

_JS_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


def _compile_js_regexp(source: str, flags: str) -> re.Pattern[str]:
    value = 0
    for flag in flags:
        value |= _JS_FLAGS.get(flag, 0)
    return re.compile(source, value)


def _js_flags(pattern: re.Pattern[str]) -> str:
    return "".join(
        flag for flag, value in _JS_FLAGS.items() if pattern.flags & value
    )


def from_jsonable(data: Any) -> Any:
    """Turn tagged JSON values into compiled patterns and plugins.

    Raises:
        ConfigError: If a tagged regular expression does not compile.
    """
    if isinstance(data, dict):
        if REGEXP_TAG in data:
            try:
                return _compile_js_regexp(data[REGEXP_TAG], data.get("flags", ""))
            except re.error as err:
                raise ConfigError(
                    f"Invalid regular expression {data[REGEXP_TAG]!r}: {err}"
                ) from err
        if PLUGIN_TAG in data:
            return Plugin(
                name=data[PLUGIN_TAG],
                options=from_jsonable(data.get("options") or {}),
            )
        return {key: from_jsonable(value) for key, value in data.items()}
    if isinstance(data, list):
        return [from_jsonable(item) for item in data]
    return data


def to_jsonable(data: Any) -> Any:
    """Turn compiled patterns and plugins into tagged JSON values."""
    if isinstance(data, re.Pattern):
        return {REGEXP_TAG: data.pattern, "flags": _js_flags(data)}
    if isinstance(data, Plugin):
        return {PLUGIN_TAG: data.name, "options": to_jsonable(data.options)}
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    return data


def load_base_config(path: Path) -> dict[str, Any]:
    """Load a dumped @wordpress/scripts base configuration.

    Args:
        path: JSON file (or YAML for hand-written fixtures).

    Returns:
        The base configuration with patterns and plugins revived.

    Raises:
        ConfigError: If the file is missing, cannot be parsed, or is not a
            mapping at the top level.
    """
    if not path.exists():
        raise ConfigError(f"Base webpack config not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as err:
        raise ConfigError(f"Failed to parse base webpack config {path}: {err}") from err

    if not isinstance(data, dict):
        raise ConfigError(f"Base webpack config must be a mapping: {path}")
    return from_jsonable(data)


def dump_configs(configs: list[dict[str, Any]]) -> str:
    """Serialize composed configurations as indented JSON."""
    return json.dumps(to_jsonable(configs), indent=2, ensure_ascii=False)
