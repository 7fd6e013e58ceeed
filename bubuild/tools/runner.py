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

"""Process execution for the wrapped build tools.

Every external tool (wp-scripts, npm, wpi18n, phpcs) runs through
run_command() so output handling and error reporting are the same
everywhere.

Output Modes:
    - Unfiltered: the child inherits the terminal; output appears exactly as
      the tool writes it.
    - Filtered: stdout and stderr are merged and streamed line by line,
      dropping JavaScript stack-trace lines (``    at ...``) so build
      errors stay readable.

Tool Resolution:
    Tools installed in the theme's node_modules/.bin are preferred. wp-scripts
    falls back to ``npx wp-scripts``; other tools fall back to PATH lookup.

Example:
    ```python
    from pathlib import Path
    from bubuild.context import RunContext
    from bubuild.tools.runner import run_command, wp_scripts_command

    ctx = RunContext(root=Path("."))
    run_command(wp_scripts_command(ctx.root, "build", "--color"), ctx, filtered=True)
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
import subprocess
import sys

from bubuild.context import RunContext
from bubuild.exceptions import ToolError
from bubuild.logging import get_global_logger

STACK_TRACE_PREFIX = "    at "


def filter_stack_traces(lines: Iterable[str]) -> Iterator[str]:
    """Drop JavaScript stack-trace lines, keep everything else."""
    for line in lines:
        if not line.startswith(STACK_TRACE_PREFIX):
            yield line


def node_bin(root: Path, name: str) -> str:
    """Path to a tool in the theme's node_modules/.bin, else its bare name."""
    local = root / "node_modules" / ".bin" / name
    if local.exists():
        return str(local)
    return name


def wp_scripts_command(root: Path, script: str, *args: str) -> list[str]:
    """Build a wp-scripts command line.

    Example:
        >>> wp_scripts_command(Path("/no/such/theme"), "build", "--color")
        ['npx', 'wp-scripts', 'build', '--color']
    """
    local = root / "node_modules" / ".bin" / "wp-scripts"
    if local.exists():
        return [str(local), script, *args]
    return ["npx", "wp-scripts", script, *args]


def npm_script_command(name: str, *args: str) -> list[str]:
    """Command running one of the theme's own npm scripts."""
    if args:
        return ["npm", "run", name, "--", *args]
    return ["npm", "run", name]


def run_command(
    cmd: Sequence[str],
    ctx: RunContext,
    filtered: bool = False,
    check: bool = True,
) -> int:
    """Run a command in the theme directory.

    Args:
        cmd: Program and arguments.
        ctx: Execution context; the command runs in ``ctx.root``.
        filtered: Strip stack-trace lines from the output.
        check: Raise ToolError on a non-zero exit status.

    Returns:
        The exit status.

    Raises:
        ToolError: If the program is not installed, or it exits non-zero
            and ``check`` is True.
    """
    logger = get_global_logger()
    command = [str(part) for part in cmd]
    logger.verbose("RUN", f"Running: {' '.join(command)}")

    try:
        if filtered:
            with subprocess.Popen(
                command,
                cwd=ctx.root,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            ) as proc:
                assert proc.stdout is not None
                for line in filter_stack_traces(proc.stdout):
                    sys.stdout.write(line)
                    sys.stdout.flush()
                exit_code = proc.wait()
        else:
            exit_code = subprocess.run(command, cwd=ctx.root, check=False).returncode
    except FileNotFoundError as err:
        raise ToolError(f"Command not found: {command[0]}") from err

    logger.debug("RUN", f"{command[0]} exited with code {exit_code}")

    if check and exit_code != 0:
        raise ToolError(
            f"Command failed with exit code {exit_code}: {' '.join(command)}",
            exit_code=exit_code,
        )
    return exit_code
