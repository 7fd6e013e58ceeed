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

"""PHP linting with PHP_CodeSniffer.

Runs phpcbf (auto-fix) and then phpcs (report) over either the PHP files
that git reports as modified or untracked, or every PHP file in the theme.
Build output, dependencies and generated ``*.asset.php`` files are never
linted.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess

from bubuild.context import RunContext
from bubuild.exceptions import ToolError
from bubuild.logging import get_global_logger
from bubuild.tools.runner import run_command

EXCLUDED_DIRS = ("node_modules", "vendor", "build", "dev")
GENERATED_SUFFIX = ".asset.php"


def find_phpcs(root: Path) -> tuple[str, str]:
    """Locate phpcs and phpcbf.

    Prefers the theme's composer install (vendor/bin), then PATH.

    Returns:
        (phpcs, phpcbf) executable paths.

    Raises:
        ToolError: If phpcs is not installed.
    """
    vendor_bin = root / "vendor" / "bin"
    if (vendor_bin / "phpcs").exists():
        return str(vendor_bin / "phpcs"), str(vendor_bin / "phpcbf")

    phpcs = shutil.which("phpcs")
    phpcbf = shutil.which("phpcbf")
    if phpcs and phpcbf:
        return phpcs, phpcbf

    raise ToolError("phpcs not found. Run 'composer install' first.")


def all_php_files(root: Path) -> list[str]:
    """Every lintable PHP file under root, as sorted relative POSIX paths."""
    files = []
    for path in root.rglob("*.php"):
        relative = path.relative_to(root)
        if any(part in EXCLUDED_DIRS for part in relative.parts[:-1]):
            continue
        if path.name.endswith(GENERATED_SUFFIX):
            continue
        files.append(relative.as_posix())
    return sorted(files)


def modified_php_files(root: Path) -> list[str]:
    """PHP files git reports as modified or untracked.

    Raises:
        ToolError: If git is unavailable or root is not a git work tree.
    """
    cmd = [
        "git",
        "ls-files",
        "-om",
        "--exclude-standard",
        "*.php",
        "**/*.php",
        f":!:*{GENERATED_SUFFIX}",
        *(f":!:{name}/*" for name in EXCLUDED_DIRS),
    ]
    try:
        result = subprocess.run(
            cmd, cwd=root, capture_output=True, text=True, check=True
        )
    except FileNotFoundError as err:
        raise ToolError("git not found; cannot list modified PHP files") from err
    except subprocess.CalledProcessError as err:
        raise ToolError(
            f"git ls-files failed (exit code {err.returncode}): {err.stderr.strip()}",
            exit_code=err.returncode,
        ) from err

    # -om can list a file twice (modified and other)
    return sorted({line for line in result.stdout.splitlines() if line.strip()})


def lint_php(ctx: RunContext, all_files: bool = False) -> list[str]:
    """Auto-fix then report PHP coding-standard issues.

    Args:
        ctx: Execution context.
        all_files: Lint every PHP file instead of only modified ones.

    Returns:
        The files that were linted (empty when there was nothing to lint).

    Raises:
        ToolError: If phpcs is missing or reports violations.
    """
    logger = get_global_logger()

    phpcs, phpcbf = find_phpcs(ctx.root)
    files = all_php_files(ctx.root) if all_files else modified_php_files(ctx.root)

    if not files:
        if all_files:
            logger.info("No PHP files found to lint.")
        else:
            logger.info("No modified PHP files found to lint.")
        return []

    logger.info("Running phpcbf (auto-fix)...")
    # phpcbf exits non-zero after fixing files; phpcs reports what is left
    run_command([phpcbf, "--colors", "--extensions=php", *files], ctx, check=False)

    logger.info("")
    logger.info("Running phpcs (report)...")
    run_command([phpcs, "--colors", "--extensions=php", *files], ctx)
    return files
