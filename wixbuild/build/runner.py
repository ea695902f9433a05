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

"""Toolchain process execution for wixbuild.

This module locates toolchain executables (candle, light, signtool) and runs
them as child processes.

Executable lookup order:
    1. <toolchain root>/bin/<name> (the WiX Toolset layout)
    2. <toolchain root>/<name>
    3. PATH

Output handling:
    - capture=True: stdout and stderr are buffered and never printed; a
      non-zero exit attaches them to ToolFailed, whose message the CLI
      prints once
    - capture=False: the tool writes straight to the inherited terminal

Design Principles:
    - One child process per call; the call blocks until it exits
    - The runner never interprets tool output
    - Anything with a matching run() method can stand in for ProcessRunner
      (see tests/conftest.py for the recording double)

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from wixbuild.build.runner import ProcessRunner

        runner = ProcessRunner(toolchain_root=Path("C:/Program Files (x86)/WiX Toolset v3.11"))
        result = runner.run("candle", ["-?"], capture=True)
        print(result.returncode, result.elapsed)
        ```
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import subprocess
import sys
import time
from typing import Protocol, Sequence

from wixbuild.exceptions import ToolFailed, ToolNotFound
from wixbuild.logging import Logger, SilentLogger
from wixbuild.results import StageResult

# Environment variable set by the WiX Toolset installer.
WIX_ENV = "WIX"


class Runner(Protocol):
    """Anything that can run a named toolchain executable."""

    def run(self, tool: str, args: Sequence[str], capture: bool) -> StageResult:
        """Run 'tool' with 'args' and wait for it to exit.

        Raises:
            ToolNotFound: If the tool cannot be located or started.
            ToolFailed: If the tool exits with a non-zero status.
        """
        ...


def _candidates(name: str, root: Path) -> list[Path]:
    names = [name]
    if sys.platform == "win32" and not name.lower().endswith(".exe"):
        names.insert(0, f"{name}.exe")
    return [folder / n for folder in (root / "bin", root) for n in names]


def find_tool(name: str, root: Path | None = None) -> Path:
    """Locate a toolchain executable.

    Args:
        name: Executable name without extension (e.g., "candle").
        root: Toolchain installation directory searched before PATH.

    Returns:
        Path to the executable.

    Raises:
        ToolNotFound: If the executable is in neither location.
    """
    if root is not None:
        for candidate in _candidates(name, Path(root)):
            if candidate.is_file() and os.access(candidate, os.X_OK):
                return candidate

    found = shutil.which(name)
    if found:
        return Path(found)
    raise ToolNotFound(name)


def _format_command(executable: Path, args: Sequence[str]) -> str:
    return subprocess.list2cmdline([str(executable), *args])


class ProcessRunner:
    """Runs toolchain executables with subprocess.

    Args:
        toolchain_root: Directory searched before PATH. Default: the WIX
            environment variable, if set.
        tool_roots: Per-tool search directories that take precedence over
            toolchain_root (e.g., {"signtool": Path(...)}).
        logger: Logger for progress output. Default is silent.
    """

    def __init__(
        self,
        toolchain_root: Path | None = None,
        tool_roots: dict[str, Path] | None = None,
        logger: Logger | None = None,
    ) -> None:
        if toolchain_root is None and os.environ.get(WIX_ENV):
            toolchain_root = Path(os.environ[WIX_ENV])
        self.toolchain_root = toolchain_root
        self.tool_roots = dict(tool_roots or {})
        self.logger = logger if logger is not None else SilentLogger()

    def locate(self, tool: str) -> Path:
        """Resolve 'tool' to an executable path."""
        root = self.tool_roots.get(tool)
        if root is not None:
            for candidate in _candidates(tool, root):
                if candidate.is_file() and os.access(candidate, os.X_OK):
                    return candidate
        return find_tool(tool, self.toolchain_root)

    def run(self, tool: str, args: Sequence[str], capture: bool = True) -> StageResult:
        """Run a toolchain executable and wait for it to exit.

        Args:
            tool: Executable name (e.g., "candle").
            args: Command-line arguments.
            capture: Collect output instead of inheriting the terminal.

        Returns:
            StageResult for a zero exit status.

        Raises:
            ToolNotFound: If the tool cannot be located or started.
            ToolFailed: If the tool exits with a non-zero status. Captured
                output is attached to the exception and is not printed.
        """
        executable = self.locate(tool)
        args = tuple(str(a) for a in args)
        self.logger.debug("RUN", _format_command(executable, args))

        started = time.monotonic()
        try:
            if capture:
                completed = subprocess.run(
                    [str(executable), *args],
                    capture_output=True,
                    stdin=subprocess.DEVNULL,
                    text=True,
                    errors="replace",
                    check=False,
                )
            else:
                completed = subprocess.run([str(executable), *args], check=False)
        except OSError as err:
            raise ToolNotFound(tool, f"{executable}: {err}") from err
        elapsed = time.monotonic() - started

        output = None
        if capture:
            output = (completed.stdout or "") + (completed.stderr or "")
        self.logger.verbose(
            "RUN", f"{tool} exited with status {completed.returncode} ({elapsed:.2f}s)"
        )

        if completed.returncode != 0:
            raise ToolFailed(tool, completed.returncode, output)

        if output:
            for line in output.splitlines():
                self.logger.debug("RUN", f"  {line}")

        return StageResult(
            tool=tool,
            executable=executable,
            args=args,
            returncode=completed.returncode,
            output=output,
            elapsed=elapsed,
        )
