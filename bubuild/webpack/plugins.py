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

"""Webpack plugin references.

Webpack plugins are JavaScript class instances. On the Python side a plugin
is described by its class name and constructor options; the JavaScript
loader that consumes the composed configuration instantiates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

COPY_PLUGIN = "CopyWebpackPlugin"
REMOVE_EMPTY_SCRIPTS_PLUGIN = "RemoveEmptyScriptsPlugin"


@dataclass(frozen=True)
class Plugin:
    """A webpack plugin instance.

    Attributes:
        name: Plugin class name (e.g., "CopyWebpackPlugin").
        options: Constructor options.
    """

    name: str
    options: dict[str, Any] = field(default_factory=dict)

    def is_a(self, name: str) -> bool:
        """Return True when this plugin is an instance of ``name``."""
        return self.name == name
