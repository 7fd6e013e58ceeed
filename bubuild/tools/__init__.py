"""
External tool invocation for bu-build.

Public API:

run_command : function
    Run a command in the theme directory, optionally filtering stack traces.
wp_scripts_command : function
    Command line for a @wordpress/scripts script.
npm_script_command : function
    Command line for one of the theme's npm scripts.
lint_php : function
    phpcbf + phpcs over modified or all PHP files.
"""

from .php import lint_php
from .runner import node_bin, npm_script_command, run_command, wp_scripts_command

__all__ = [
    "lint_php",
    "node_bin",
    "npm_script_command",
    "run_command",
    "wp_scripts_command",
]
