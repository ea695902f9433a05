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

"""Logging interface for wixbuild.

Library code never configures process-wide logging state. Instead, a logger
instance is created by the caller (normally the CLI) and passed to the
objects that need it, so two pipelines in the same process can run with
different verbosity.

The logger supports four kinds of output:
- Step: Always printed (for progress indicators)
- Warning: Always printed
- Verbose: Printed at verbosity 1 and above (``-v``)
- Debug: Printed at verbosity 2 and above (``-vv``)

Example:
    Pass a logger to the build pipeline:
        ```python
        from wixbuild.build import BuildPipeline
        from wixbuild.logging import get_logger

        logger = get_logger(verbosity=args.verbose)
        BuildPipeline(config, logger=logger).run()
        ```

    Use in library code:
        ```python
        def my_function(logger=None):
            if logger is None:
                logger = SilentLogger()
            logger.verbose("BUILD", "Processing...")
        ```

Note:
    Library functions default to SilentLogger, so nothing is printed unless
    the caller asks for it.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def warning(self, message: str) -> None:
        """Print a warning message."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message.

        Args:
            prefix: Message prefix (e.g., "BUILD", "RUN").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message.

        Args:
            prefix: Message prefix (e.g., "RUN", "CONFIG").
            message: Log message.
        """
        ...


class DefaultLogger:
    """Default logger implementation that prints to a text stream.

    Respects the verbosity level and formats output consistently with the
    CLI output format.
    """

    def __init__(self, verbosity: int = 0, stream: TextIO | None = None) -> None:
        """Initialize logger with a verbosity level.

        Args:
            verbosity: 0 prints steps and warnings only, 1 adds verbose
                messages, 2 or more adds debug messages.
            stream: Destination stream. Default is sys.stdout at the
                time of each call.
        """
        self.verbosity = verbosity
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator."""
        print(f"[{step}/{total}] {message}", file=self.stream)

    def warning(self, message: str) -> None:
        """Print a warning message."""
        print(f"[WARNING] {message}", file=self.stream)

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message (only at verbosity 1+)."""
        if self.verbosity >= 1:
            print(f"[{prefix}] {message}", file=self.stream)

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message (only at verbosity 2+)."""
        if self.verbosity >= 2:
            print(f"[{prefix}] {message}", file=self.stream)


class SilentLogger:
    """Logger that suppresses all output.

    Useful for programmatic usage and tests.
    """

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


def get_logger(verbosity: int = 0, stream: TextIO | None = None) -> Logger:
    """Get a logger instance with the given verbosity.

    Args:
        verbosity: Number of ``-v`` flags given on the command line.
        stream: Destination stream. Default is sys.stdout.

    Returns:
        A logger instance configured with the specified verbosity.

    Example:
        ```python
        logger = get_logger(verbosity=2)
        logger.debug("RUN", "candle -nologo ...")
        ```
    """
    return DefaultLogger(verbosity=verbosity, stream=stream)
