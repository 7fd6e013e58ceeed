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

"""theme.json compilation from modular source fragments.

Public API:

- compile_theme_json: Merge src/theme-json fragments into theme.json
- watch_theme_json: Recompile on every change
- resolve_existing_file: First existing file among candidate suffixes

Example:

    from bubuild.theme_json import compile_theme_json

    result = compile_theme_json()
    if result.status == "skipped":
        print("Theme does not use modular theme.json")

"""

from .compiler import (
    FRAGMENT_ROLES,
    FRAGMENT_SUFFIXES,
    compile_theme_json,
    load_fragment,
    merge_fragments,
    resolve_existing_file,
    watch_theme_json,
)

__all__ = [
    "FRAGMENT_ROLES",
    "FRAGMENT_SUFFIXES",
    "compile_theme_json",
    "load_fragment",
    "merge_fragments",
    "resolve_existing_file",
    "watch_theme_json",
]
