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

"""Execution context threaded through every bu-build task.

The top-level CLI invocation owns a RunContext and hands it to the task it
runs. Tasks that run other tasks pass ``ctx.child()`` down, so nested steps
know the banner has already been shown and do not inherit the passthrough
arguments meant for the outer command.

Example:
    ```python
    from pathlib import Path
    from bubuild.context import RunContext

    ctx = RunContext(root=Path.cwd(), args=("--mode=development",))
    step_ctx = ctx.child()
    assert step_ctx.banner_shown
    assert step_ctx.args == ()
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path


@dataclass(frozen=True)
class RunContext:
    """State shared by a top-level invocation and the steps it runs.

    Attributes:
        root: Theme or plugin directory the tools run in.
        args: Extra arguments forwarded to the wrapped tool.
        banner_shown: True once the toolkit banner has been printed.
        verbose: Show verbose output.
        debug: Show debug output (implies verbose).
    """

    root: Path
    args: tuple[str, ...] = field(default_factory=tuple)
    banner_shown: bool = False
    verbose: bool = False
    debug: bool = False

    def child(self) -> RunContext:
        """Context for a nested step of this invocation."""
        return replace(self, args=(), banner_shown=True)

    def announced(self) -> RunContext:
        """Context after the banner has been printed."""
        return replace(self, banner_shown=True)
