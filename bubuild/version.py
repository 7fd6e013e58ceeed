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

"""WordPress theme header stamping.

WordPress reads theme metadata from the comment header of style.css. This
module generates that header from package.json and writes it into:

    - style.css (file replaced with the header)
    - build/css/theme.css (header prepended to the compiled stylesheet)

Targets that do not exist are skipped with a warning, so plugins and themes
without a compiled theme.css can still run ``build:version``.

Example:
    ```python
    from pathlib import Path
    from bubuild.version import update_version

    result = update_version(Path("."))
    print(result.version, [p.name for p in result.updated])
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from bubuild.config import load_theme_package
from bubuild.exceptions import ToolError
from bubuild.logging import get_global_logger
from bubuild.results import VersionResult

DEFAULT_AUTHOR = "Boston University Interactive Design"
DEFAULT_TEMPLATE = "responsive-framework-3x"

# (relative path, prepend to existing content)
HEADER_TARGETS: tuple[tuple[str, bool], ...] = (
    ("style.css", False),
    ("build/css/theme.css", True),
)


def _repository_url(repository: Any) -> str:
    """package.json allows "repository" as a string or as {"url": ...}."""
    if isinstance(repository, dict):
        return str(repository.get("url", ""))
    return str(repository or "")


def generate_css_header(
    package: dict[str, Any],
    author: str = DEFAULT_AUTHOR,
    template: str = DEFAULT_TEMPLATE,
) -> str:
    """Generate the WordPress theme header from package.json data.

    Args:
        package: Parsed package.json.
        author: Value of the Author field.
        template: Parent theme directory name for the Template field.

    Returns:
        The header text, ending with a newline.

    Example:
        >>> print(generate_css_header({"name": "my-theme", "version": "2.1.0"}))
        @charset "UTF-8";
        /*
        Theme Name: my-theme
        ...
    """
    name = package.get("name", "")
    version = package.get("version", "1.0.0")
    description = package.get("description", "")
    repository = _repository_url(package.get("repository", ""))
    homepage = package.get("homepage", "")

    return (
        '@charset "UTF-8";\n'
        "/*\n"
        f"Theme Name: {name}\n"
        f"Theme URI: {repository}\n"
        f"Description: {description}\n"
        f"Author: {author}\n"
        f"Website: {homepage}\n"
        f"Version: {version}\n"
        f"Text Domain: {name}\n"
        f"Template: {template}\n"
        "*/\n"
    )


def _update_file(path: Path, header: str, prepend: bool) -> None:
    try:
        if prepend:
            existing = path.read_text(encoding="utf-8")
            path.write_text(header + existing, encoding="utf-8")
        else:
            path.write_text(header, encoding="utf-8")
    except OSError as err:
        raise ToolError(f"Failed to update {path}: {err}") from err


def update_version(
    root: Path,
    author: str = DEFAULT_AUTHOR,
    template: str = DEFAULT_TEMPLATE,
) -> VersionResult:
    """Write the theme header into style.css and build/css/theme.css.

    Args:
        root: Theme directory containing package.json.
        author: Value of the Author field.
        template: Value of the Template field.

    Returns:
        VersionResult with the version written and the files updated or
        skipped.

    Raises:
        ConfigError: If package.json is missing or invalid.
        ToolError: If a target file cannot be written.
    """
    logger = get_global_logger()

    package = load_theme_package(root)
    header = generate_css_header(package, author=author, template=template)

    updated: list[Path] = []
    skipped: list[Path] = []
    for relative, prepend in HEADER_TARGETS:
        path = root / relative
        if not path.exists():
            logger.warning(f"Skipping {relative} (file not found)")
            skipped.append(path)
            continue
        _update_file(path, header, prepend)
        logger.success(f"Updated {relative}")
        updated.append(path)

    return VersionResult(
        version=str(package.get("version", "1.0.0")),
        updated=updated,
        skipped=skipped,
    )
