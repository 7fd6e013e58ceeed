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

"""theme.json compiler.

Combines modular theme.json source fragments into a single theme.json in the
theme root, so themes can keep their global settings and styles in separate,
maintainable files.

Directory Structure:
    src/theme-json/
      config.yaml    - Base configuration (version, customTemplates, templateParts)
      settings.yaml  - Global settings (colors, typography, spacing, etc.)
      styles.yaml    - Global styles (elements, blocks, variations)

    Each fragment may be written as ``.yaml`` or ``.json``. When both exist
    the ``.yaml`` file is used.

Merge Order:
    Fragments are shallow-merged in the order config -> settings -> styles.
    A later fragment's top-level key replaces an earlier one's. A missing
    fragment contributes nothing, exactly like an empty one.

Output:
    Formatted JSON (2-space indentation, keys in the order they appear)
    written to theme.json, replacing any existing file.

Error Handling:
    - No src/theme-json directory: nothing to do, reported and skipped
    - Directory present but no fragments: ConfigError
    - A fragment that cannot be parsed: ConfigError naming the file; nothing
      is written

Example:
    ```python
    from pathlib import Path
    from bubuild.theme_json import compile_theme_json

    result = compile_theme_json(Path("wp-content/themes/my-theme"))
    print(result.status, result.output_path)
    ```

See https://developer.wordpress.org/block-editor/reference-guides/theme-json-reference/
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import json
from pathlib import Path
import time
from typing import Any

import yaml

from bubuild.exceptions import ConfigError
from bubuild.logging import get_global_logger
from bubuild.results import ThemeJsonResult

SOURCE_DIR = Path("src") / "theme-json"
OUTPUT_FILE = "theme.json"

FRAGMENT_ROLES = ("config", "settings", "styles")
FRAGMENT_SUFFIXES = (".yaml", ".json")


def resolve_existing_file(base_path: Path, suffixes: Iterable[str]) -> Path | None:
    """Return the first ``base_path + suffix`` that exists, or None.

    Example:
        >>> resolve_existing_file(Path("src/theme-json/config"), (".yaml", ".json"))
        PosixPath('src/theme-json/config.yaml')
    """
    for suffix in suffixes:
        candidate = base_path.with_name(base_path.name + suffix)
        if candidate.is_file():
            return candidate
    return None


def load_fragment(path: Path) -> dict[str, Any]:
    """Load one theme.json source fragment.

    An empty file is an empty fragment.

    Raises:
        ConfigError: If the file cannot be read or parsed, or its top level
            is not a mapping. The parser's message is kept.
    """
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".json":
            data = json.loads(text) if text.strip() else None
        else:
            data = yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as err:
        raise ConfigError(f"Error loading {path}: {err}") from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Error loading {path}: top-level value must be a mapping, "
            f"got {type(data).__name__}"
        )
    return data


def merge_fragments(fragments: Sequence[dict[str, Any] | None]) -> dict[str, Any]:
    """Shallow-merge fragments in order; later top-level keys win."""
    merged: dict[str, Any] = {}
    for fragment in fragments:
        if fragment is not None:
            merged.update(fragment)
    return merged


def _source_files(source_dir: Path) -> list[Path | None]:
    return [
        resolve_existing_file(source_dir / role, FRAGMENT_SUFFIXES)
        for role in FRAGMENT_ROLES
    ]


def compile_theme_json(root: Path | None = None) -> ThemeJsonResult:
    """Compile src/theme-json fragments into theme.json.

    Args:
        root: Theme directory. Default is the current working directory.

    Returns:
        ThemeJsonResult dataclass with the following fields:

            - status (str): "success", or "skipped" when the theme has no
                src/theme-json directory (nothing is written).
            - output_path (Path): Path of theme.json.
            - fragments (list[Path]): Fragment files merged, in order.
            - top_level_keys (list[str]): Keys of the compiled document.

    Raises:
        ConfigError: If no fragments exist, or a fragment fails to load.
            theme.json is left untouched in both cases.
    """
    logger = get_global_logger()

    root = root or Path.cwd()
    source_dir = root / SOURCE_DIR
    output_path = root / OUTPUT_FILE

    if not source_dir.is_dir():
        logger.info("No src/theme-json directory found. Skipping theme.json compilation.")
        return ThemeJsonResult(
            status="skipped", output_path=output_path, fragments=[], top_level_keys=[]
        )

    files = _source_files(source_dir)
    if all(path is None for path in files):
        raise ConfigError(
            f"No theme.json source files found in {source_dir}. "
            f"Expected: {', '.join(role + '.yaml' for role in FRAGMENT_ROLES)} "
            "(or .json)"
        )

    fragments: list[dict[str, Any] | None] = []
    for path in files:
        if path is None:
            fragments.append(None)
            continue
        logger.verbose("THEME-JSON", f"Loading: {path.relative_to(root)}")
        fragments.append(load_fragment(path))

    theme = merge_fragments(fragments)

    try:
        content = json.dumps(theme, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"theme.json sources contain non-JSON values: {err}") from err

    output_path.write_text(content, encoding="utf-8")
    logger.success(f"theme.json compiled successfully to {output_path}")

    return ThemeJsonResult(
        status="success",
        output_path=output_path,
        fragments=[path for path in files if path is not None],
        top_level_keys=list(theme),
    )


def _snapshot(source_dir: Path) -> dict[Path, float]:
    if not source_dir.is_dir():
        return {}
    return {
        path: path.stat().st_mtime
        for path in sorted(source_dir.rglob("*"))
        if path.is_file()
    }


def watch_theme_json(
    root: Path | None = None,
    interval: float = 1.0,
    max_cycles: int | None = None,
) -> None:
    """Recompile theme.json whenever a file under src/theme-json changes.

    Compiles once at start, then polls modification times. Compile errors
    are reported and watching continues so the next save can fix them.

    Args:
        root: Theme directory. Default is the current working directory.
        interval: Seconds between polls.
        max_cycles: Stop after this many polls. Default runs until
            interrupted.
    """
    logger = get_global_logger()

    root = root or Path.cwd()
    source_dir = root / SOURCE_DIR

    def _compile() -> None:
        try:
            compile_theme_json(root)
        except ConfigError as err:
            logger.error(str(err))

    logger.info(f"Watching {source_dir} for changes...")
    _compile()
    seen = _snapshot(source_dir)

    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        time.sleep(interval)
        cycles += 1
        current = _snapshot(source_dir)
        if current != seen:
            logger.verbose("THEME-JSON", "Change detected, recompiling")
            seen = current
            _compile()
