"""
BU Build Toolkit

Build tooling for Boston University WordPress themes and plugins, wrapping
@wordpress/scripts behind a single ``bu-build`` command.

bu-build provides:
  - Two webpack configurations composed from the wp-scripts defaults
    (block assets and theme assets)
  - theme.json compiled from YAML/JSON fragments in src/theme-json
  - Production build and development watch pipelines
  - WordPress theme header stamping from package.json
  - Linting, testing and i18n commands with consistent output

Quick Start
-----------
Build a theme for production:

    $ bu-build build

Start development mode:

    $ bu-build start

For the full command list:

    $ bu-build help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Task registry and build/watch pipelines.
config : package
    bu-build.yaml and package.json loading.
webpack : package
    Merge-rule interpreter and webpack configuration composer.
theme_json : package
    theme.json fragment compiler and watcher.
tools : package
    External process runner and PHP linting.
version : module
    Theme header stamping.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from bubuild.webpack import create_config, merge_with_rules
    from bubuild.theme_json import compile_theme_json
    from bubuild.core import run_task

For more details, see the individual module docstrings.
"""

__version__ = "1.0.0"
__description__ = "BU Build Tools for WordPress themes and plugins"

# Re-export commonly used functions for convenience
from bubuild.theme_json import compile_theme_json
from bubuild.webpack import create_config, create_webpack_config, merge_with_rules

__all__ = [
    "__version__",
    "__description__",
    "compile_theme_json",
    "create_config",
    "create_webpack_config",
    "merge_with_rules",
]
