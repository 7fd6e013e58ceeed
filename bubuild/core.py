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

"""Core orchestration for bu-build.

This module holds the task registry behind every ``bu-build <command>`` and
the pipelines that sequence them.

Pipelines:

- **build**: theme.json (if src/theme-json exists) -> theme's ``build:theme``
    (if defined) -> webpack -> ``build:i18n`` -> ``build:version`` (each if
    the theme's package.json defines it). Steps run one after the other and
    the first failure stops the build.

- **start**: webpack watch, plus the theme.json watcher (if src/theme-json
    exists) and the theme's ``watch:theme`` (if defined). Watchers run in
    parallel threads.

Step Execution:
    A step whose name is a registered task runs in-process with
    ``ctx.child()``. Any other step is one of the theme's own npm scripts and
    runs as ``npm run <step>``.

Design Principles:

- Tasks are plain functions registered by name (simple dict registry)
- Every task receives the RunContext explicitly; there is no ambient state
- Error handling uses exceptions; the CLI layer formats them for display
- Filesystem probes and package.json decide which optional steps run

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from bubuild.context import RunContext
        from bubuild.core import run_task

        result = run_task("build", RunContext(root=Path(".")))
        print(result.steps)
        ```

"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
import queue
import shutil
import threading
from typing import Any

from bubuild.config import (
    load_theme_package,
    load_toolkit_options,
    theme_scripts,
    webpack_options,
)
from bubuild.context import RunContext
from bubuild.exceptions import BuildToolkitError, ConfigError, ToolError
from bubuild.logging import get_global_logger
from bubuild.results import PipelineResult
from bubuild.theme_json import compile_theme_json, watch_theme_json
from bubuild.theme_json.compiler import SOURCE_DIR
from bubuild.tools import (
    lint_php,
    node_bin,
    npm_script_command,
    run_command,
    wp_scripts_command,
)
from bubuild.version import update_version
from bubuild.webpack import create_config, dump_configs, load_base_config

TaskHandler = Callable[[RunContext], Any]

LINT_STEPS = ("lint:css", "lint:js", "lint:md", "lint:pkg", "lint:php")
I18N_STEPS = ("build:clean", "build:wpi18n", "build:wpmakepot")
LANGUAGES_DIR = "languages"
DEFAULT_BASE_CONFIG = "webpack.base.json"

# -------------------------------
# Task registry
# -------------------------------


@dataclass(frozen=True)
class Task:
    """A bu-build command.

    Attributes:
        name: Command name (e.g., "build:scripts").
        handler: Function run with the execution context.
        help: One-line description for the command list.
        category: Group shown in help output.
    """

    name: str
    handler: TaskHandler
    help: str
    category: str


TASKS: dict[str, Task] = {}


def register_task(
    name: str, help: str, category: str
) -> Callable[[TaskHandler], TaskHandler]:
    """Register a function as the handler for a bu-build command."""

    def decorator(func: TaskHandler) -> TaskHandler:
        TASKS[name] = Task(name=name, handler=func, help=help, category=category)
        return func

    return decorator


def get_task(name: str) -> Task:
    """Look up a registered task.

    Raises:
        ConfigError: If no task has that name.
    """
    try:
        return TASKS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown command: {name}. Run 'bu-build help' to see available commands."
        ) from None


def available_tasks() -> list[Task]:
    """All registered tasks in registration order."""
    return list(TASKS.values())


def run_task(name: str, ctx: RunContext) -> Any:
    """Run a registered task with the given context."""
    return get_task(name).handler(ctx)


# -------------------------------
# Step planning and execution
# -------------------------------


def plan_build_steps(root: Path, scripts: dict[str, str]) -> list[str]:
    """Steps of the production build for a theme, in execution order."""
    steps = []
    if (root / SOURCE_DIR).is_dir():
        steps.append("build:theme-json")
    if "build:theme" in scripts:
        steps.append("build:theme")
    steps.append("build:scripts")
    if "build:i18n" in scripts:
        steps.append("build:i18n")
    if "build:version" in scripts:
        steps.append("build:version")
    return steps


def plan_watch_tasks(root: Path, scripts: dict[str, str]) -> list[str]:
    """Watchers started by ``bu-build start``."""
    tasks = ["watch:scripts"]
    if (root / SOURCE_DIR).is_dir():
        tasks.append("watch:theme-json")
    if "watch:theme" in scripts:
        tasks.append("watch:theme")
    return tasks


def _run_step(step: str, ctx: RunContext) -> None:
    if step in TASKS:
        run_task(step, ctx)
    else:
        run_command(npm_script_command(step, *ctx.args), ctx)


def run_sequential(
    steps: Sequence[str], ctx: RunContext, forward_args_to: str | None = None
) -> None:
    """Run steps in order, stopping at the first failure.

    Args:
        steps: Step names.
        ctx: Context of the invocation that planned the steps.
        forward_args_to: Step that receives the invocation's passthrough
            arguments. Other steps get none.
    """
    logger = get_global_logger()
    total = len(steps)
    for index, step in enumerate(steps, start=1):
        logger.step(index, total, step)
        step_ctx = ctx.child()
        if step == forward_args_to:
            step_ctx = replace(step_ctx, args=ctx.args)
        _run_step(step, step_ctx)


def _run_guarded(step: str, ctx: RunContext, errors: queue.Queue[Exception]) -> None:
    try:
        _run_step(step, ctx)
    except Exception as err:  # re-raised by run_parallel in the main thread
        errors.put(err)


def run_parallel(steps: Sequence[str], ctx: RunContext, poll: float = 0.2) -> None:
    """Run steps concurrently; the first failure is raised.

    Watch steps never finish on their own, so this returns only when every
    step has ended (or raises as soon as one fails).
    """
    errors: queue.Queue[Exception] = queue.Queue()
    threads = [
        threading.Thread(
            target=_run_guarded,
            args=(step, ctx.child(), errors),
            name=f"bu-build {step}",
            daemon=True,
        )
        for step in steps
    ]
    for thread in threads:
        thread.start()

    while any(thread.is_alive() for thread in threads):
        try:
            raise errors.get(timeout=poll)
        except queue.Empty:
            continue

    if not errors.empty():
        raise errors.get()


def _print_banner(title: str) -> None:
    logger = get_global_logger()
    logger.info("")
    logger.info("=" * 70)
    logger.info(f"  {title}")
    logger.info("=" * 70)
    logger.info("")


# -------------------------------
# Watch tasks
# -------------------------------


@register_task("start", "Start development mode with watch", "Watch")
def start(ctx: RunContext) -> PipelineResult:
    tasks = plan_watch_tasks(ctx.root, theme_scripts(load_theme_package(ctx.root)))
    _print_banner(f"Starting development mode ({len(tasks)} watchers)")

    if len(tasks) > 1:
        run_parallel(tasks, ctx)
    else:
        watch_scripts(ctx)
    return PipelineResult(task="start", steps=tasks, status="success")


@register_task("watch:scripts", "Watch and build scripts (filtered output)", "Watch")
def watch_scripts(ctx: RunContext) -> None:
    get_global_logger().info("> WATCH: Scripts and styles")
    run_command(
        wp_scripts_command(ctx.root, "start", "--color", *ctx.args), ctx, filtered=True
    )


@register_task(
    "watch:theme-json", "Watch and compile theme.json from src/theme-json", "Watch"
)
def watch_theme_json_task(ctx: RunContext) -> None:
    get_global_logger().info("> WATCH: theme.json changes")
    options = load_toolkit_options(ctx.root)
    watch_theme_json(ctx.root, interval=float(options["watch_interval"]))


@register_task("watch:verbose", "Watch with full output (no filtering)", "Watch")
def watch_verbose(ctx: RunContext) -> None:
    run_command(wp_scripts_command(ctx.root, "start", *ctx.args), ctx)


# -------------------------------
# Build tasks
# -------------------------------


@register_task("build", "Build for production", "Build")
def build(ctx: RunContext) -> PipelineResult:
    steps = plan_build_steps(ctx.root, theme_scripts(load_theme_package(ctx.root)))
    _print_banner(f"Building for production ({len(steps)} steps)")

    if len(steps) > 1:
        run_sequential(steps, ctx, forward_args_to="build:scripts")
    else:
        build_scripts(ctx)
    return PipelineResult(task="build", steps=steps, status="success")


@register_task("build:scripts", "Build scripts only (filtered output)", "Build")
def build_scripts(ctx: RunContext) -> None:
    get_global_logger().info("> Compiling scripts and styles")
    run_command(
        wp_scripts_command(ctx.root, "build", "--color", *ctx.args), ctx, filtered=True
    )


@register_task("build:theme-json", "Compile theme.json from src/theme-json", "Build")
def build_theme_json(ctx: RunContext):
    get_global_logger().info("> Compiling theme.json")
    return compile_theme_json(ctx.root)


@register_task("build:verbose", "Build with full output (no filtering)", "Build")
def build_verbose(ctx: RunContext) -> None:
    run_command(wp_scripts_command(ctx.root, "build", *ctx.args), ctx)


@register_task("build:version", "Update version in style.css and theme.css", "Build")
def build_version(ctx: RunContext):
    get_global_logger().info("> Updating version information")
    header = load_toolkit_options(ctx.root)["theme_header"]
    return update_version(
        ctx.root, author=header["author"], template=header["template"]
    )


# -------------------------------
# i18n tasks
# -------------------------------


@register_task("build:i18n", "Build internationalization files", "i18n")
def build_i18n(ctx: RunContext) -> PipelineResult:
    logger = get_global_logger()
    logger.info("> Building internationalization files")
    run_sequential(I18N_STEPS, ctx)
    logger.success("Internationalization files built successfully")
    return PipelineResult(task="build:i18n", steps=list(I18N_STEPS), status="success")


@register_task("build:clean", "Clean language files", "i18n")
def build_clean(ctx: RunContext) -> list[Path]:
    """Remove everything inside languages/, keeping the directory."""
    logger = get_global_logger()
    languages = ctx.root / LANGUAGES_DIR
    removed: list[Path] = []
    if not languages.is_dir():
        logger.verbose("I18N", f"No {LANGUAGES_DIR}/ directory to clean")
        return removed

    for entry in sorted(languages.iterdir()):
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as err:
            raise ToolError(f"Failed to remove {entry}: {err}") from err
        removed.append(entry)
    logger.verbose("I18N", f"Removed {len(removed)} item(s) from {LANGUAGES_DIR}/")
    return removed


@register_task("build:wpi18n", "Add text domain to PHP files", "i18n")
def build_wpi18n(ctx: RunContext) -> None:
    run_command([node_bin(ctx.root, "wpi18n"), "addtextdomain", *ctx.args], ctx)


@register_task("build:wpmakepot", "Generate POT file", "i18n")
def build_wpmakepot(ctx: RunContext) -> None:
    run_command(
        [node_bin(ctx.root, "wpi18n"), "makepot", "--domain-path", LANGUAGES_DIR],
        ctx,
    )


# -------------------------------
# Lint tasks
# -------------------------------


@register_task("lint", "Run all linters", "Lint")
def lint(ctx: RunContext) -> PipelineResult:
    run_sequential(LINT_STEPS, ctx)
    return PipelineResult(task="lint", steps=list(LINT_STEPS), status="success")


def _wp_scripts_task(script: str, *fixed_args: str) -> TaskHandler:
    def handler(ctx: RunContext) -> None:
        run_command(wp_scripts_command(ctx.root, script, *fixed_args, *ctx.args), ctx)

    handler.__name__ = f"run_{script.replace('-', '_')}"
    return handler


register_task("lint:css", "Lint CSS/SCSS", "Lint")(_wp_scripts_task("lint-style"))
register_task("lint:js", "Lint JavaScript", "Lint")(_wp_scripts_task("lint-js"))
register_task("lint:js:fix", "Fix JavaScript linting issues", "Lint")(
    _wp_scripts_task("lint-js", "--fix", "--ignore-pattern", "/dev/")
)
register_task("lint:md", "Lint Markdown", "Lint")(_wp_scripts_task("lint-md-docs"))
register_task("lint:pkg", "Lint package.json", "Lint")(
    _wp_scripts_task("lint-pkg-json")
)


@register_task("lint:php", "Lint modified PHP files", "Lint")
def lint_php_modified(ctx: RunContext) -> list[str]:
    return lint_php(ctx, all_files=False)


@register_task("lint:php:all", "Lint all PHP files", "Lint")
def lint_php_all(ctx: RunContext) -> list[str]:
    return lint_php(ctx, all_files=True)


# -------------------------------
# Test and misc tasks
# -------------------------------

register_task("test:e2e", "Run E2E tests", "Test")(_wp_scripts_task("test-e2e"))
register_task("test:unit", "Run unit tests", "Test")(_wp_scripts_task("test-unit-js"))
register_task("format", "Format code", "Misc")(_wp_scripts_task("format"))


def _checked_wp_scripts(ctx: RunContext, script: str, ok: str, failed: str) -> None:
    logger = get_global_logger()
    try:
        run_command(wp_scripts_command(ctx.root, script, *ctx.args), ctx)
    except ToolError:
        logger.error(failed)
        raise
    logger.success(ok)


@register_task("check-engines", "Check Node/npm versions", "Misc")
def check_engines(ctx: RunContext) -> None:
    _checked_wp_scripts(
        ctx,
        "check-engines",
        "Node.js and npm versions are compatible",
        "Version compatibility check failed",
    )


@register_task("check-licenses", "Check dependency licenses", "Misc")
def check_licenses(ctx: RunContext) -> None:
    _checked_wp_scripts(
        ctx,
        "check-licenses",
        "All dependency licenses are compatible",
        "License compatibility check failed",
    )


# -------------------------------
# Webpack configuration
# -------------------------------


def compose_webpack_config(root: Path, base_path: Path) -> list[dict[str, Any]]:
    """Compose the blocks and theme webpack configs for a theme.

    Args:
        root: Theme directory (bu-build.yaml is read from here).
        base_path: JSON dump of the @wordpress/scripts default config.

    Returns:
        The two composed configurations.

    Raises:
        ConfigError: If the base dump or bu-build.yaml is invalid.
    """
    logger = get_global_logger()
    base = load_base_config(base_path)
    options = load_toolkit_options(root)
    kwargs = webpack_options(options, root)
    try:
        configs = create_config(base, **kwargs)
    except BuildToolkitError:
        raise
    except Exception as err:
        raise ConfigError(f"Invalid webpack options: {err}") from err
    logger.verbose(
        "WEBPACK",
        f"Composed {len(configs)} configs with "
        f"{len(kwargs['theme_entry_points'])} theme entry point(s)",
    )
    return configs


@register_task("config", "Print the composed webpack configs as JSON", "Misc")
def show_config(ctx: RunContext) -> str:
    """Print the blocks and theme configs composed from a base dump.

    The first passthrough argument names the base dump; it defaults to
    ``DEFAULT_BASE_CONFIG`` in the theme directory.
    """
    base_path = Path(ctx.args[0]) if ctx.args else Path(DEFAULT_BASE_CONFIG)
    if not base_path.is_absolute():
        base_path = ctx.root / base_path
    text = dump_configs(compose_webpack_config(ctx.root, base_path))
    get_global_logger().info(text)
    return text


@register_task("help", "Show this help message", "Misc")
def show_help(ctx: RunContext) -> None:
    """Print every command grouped by category."""
    logger = get_global_logger()
    logger.info("Usage: bu-build <command> [options]")
    logger.info("")

    categories: dict[str, list[Task]] = {}
    for task in available_tasks():
        categories.setdefault(task.category, []).append(task)

    width = max(len(task.name) for task in available_tasks())
    for category, tasks in categories.items():
        logger.info(f"{category} Commands:")
        for task in tasks:
            logger.info(f"  {task.name.ljust(width)}  {task.help}")
        logger.info("")

    logger.info("Options:")
    logger.info("  -v, --verbose   Show progress and high-level status updates")
    logger.info("  -d, --debug     Show detailed debugging output (implies --verbose)")
    logger.info("  --no-banner     Do not print the toolkit banner")
    logger.info("  --version       Show the toolkit version")
    logger.info("")
    logger.info("Any other options are passed through to the wrapped tool.")
