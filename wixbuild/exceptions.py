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

"""Exception hierarchy for wixbuild.

Every error raised by wixbuild inherits from WixBuildError and carries a
stable numeric ``code`` (used as the process exit status by the CLI) and a
short ``kind`` label:

| Code | Kind                  | Exception             |
| ---- | --------------------- | --------------------- |
| 1    | Generic               | WixBuildError         |
| 3    | Io                    | WixIoError            |
| 4    | Config                | ConfigError           |
| 4    | Manifest              | ManifestError         |
| 5    | MissingMetadata       | MissingMetadata       |
| 6    | UnresolvedPlaceholder | UnresolvedPlaceholder |
| 7    | SourceNotFound        | SourceNotFound        |
| 8    | FileExists            | FileExists            |
| 9    | ToolNotFound          | ToolNotFound          |
| 10   | ToolFailed            | ToolFailed            |
| 11   | CompileFailed         | CompileFailed         |
| 12   | LinkFailed            | LinkFailed            |
| 13   | SignFailed            | SignFailed            |

Exit status 2 is left to argparse for usage errors.

Example:
    Catching specific error types:
        ```python
        from wixbuild.build import BuildPipeline
        from wixbuild.exceptions import SignFailed, WixBuildError

        try:
            BuildPipeline(config).run()
        except SignFailed as e:
            print(f"Unsigned installer left at {e.artifact}")
        except WixBuildError as e:
            print(f"Error[{e.code}] ({e.kind}): {e}")
        ```
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "WixBuildError",
    "WixIoError",
    "ConfigError",
    "ManifestError",
    "MissingMetadata",
    "UnresolvedPlaceholder",
    "SourceNotFound",
    "FileExists",
    "ToolNotFound",
    "ToolFailed",
    "CompileFailed",
    "LinkFailed",
    "SignFailed",
]


class WixBuildError(Exception):
    """Base exception for all wixbuild errors.

    All wixbuild-specific exceptions inherit from this class, allowing users
    to catch all wixbuild errors with a single except clause if needed.
    """

    code = 1
    kind = "Generic"


class WixIoError(WixBuildError):
    """Raised for filesystem faults (unreadable manifest, unwritable output)."""

    code = 3
    kind = "Io"


class ConfigError(WixBuildError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing of settings files (syntax errors, invalid structure)
    - Settings values of the wrong type
    """

    code = 4
    kind = "Config"


class ManifestError(ConfigError):
    """Raised when the project manifest (Cargo.toml) is missing or malformed."""

    kind = "Manifest"


class MissingMetadata(WixBuildError):
    """Raised when a mandatory installer field cannot be determined.

    Attributes:
        field: Name of the field that could not be resolved.
    """

    code = 5
    kind = "MissingMetadata"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(
            f"No value for '{field}': set it in Cargo.toml, in wix/wixbuild.yaml "
            f"or with the matching command-line option"
        )


class UnresolvedPlaceholder(WixBuildError):
    """Raised when a template references a placeholder with no value.

    Attributes:
        name: Placeholder name without delimiters.
    """

    code = 6
    kind = "UnresolvedPlaceholder"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template placeholder '{{{{{name}}}}}' has no value")


class SourceNotFound(WixBuildError):
    """Raised when an explicitly requested WiX source file does not exist."""

    code = 7
    kind = "SourceNotFound"

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"WiX source file not found: {path}")


class FileExists(WixBuildError):
    """Raised when initialization would overwrite an existing WiX source."""

    code = 8
    kind = "FileExists"

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"WiX source already exists: {path}. Use --force to overwrite it"
        )


class ToolNotFound(WixBuildError):
    """Raised when a toolchain executable cannot be located or started."""

    code = 9
    kind = "ToolNotFound"

    def __init__(self, tool: str, detail: str | None = None) -> None:
        self.tool = tool
        message = f"Could not find the '{tool}' executable"
        if detail:
            message += f": {detail}"
        else:
            message += (
                ". Install the WiX Toolset and set the WIX environment variable, "
                "or add the tool to PATH"
            )
        super().__init__(message)


class ToolFailed(WixBuildError):
    """Raised when a toolchain executable exits with a non-zero status.

    Attributes:
        tool: Name of the tool that failed (e.g., "candle").
        status: Process exit status, or None if the tool never started.
        output: Captured combined stdout/stderr, or None when the tool
            inherited the terminal.
    """

    code = 10
    kind = "ToolFailed"
    stage = "Running"

    def __init__(
        self, tool: str, status: int | None, output: str | None = None
    ) -> None:
        self.tool = tool
        self.status = status
        self.output = output
        message = self._summary()
        if output and output.strip():
            message += f"\n{output.rstrip()}"
        super().__init__(message)

    @classmethod
    def from_failure(cls, err: ToolFailed, **kwargs) -> ToolFailed:
        """Re-label a runner failure as a specific stage failure."""
        return cls(err.tool, err.status, err.output, **kwargs)

    def _summary(self) -> str:
        if self.status is None:
            return f"{self.stage} with '{self.tool}' failed (not started)"
        return f"{self.stage} with '{self.tool}' failed (exit status {self.status})"


class CompileFailed(ToolFailed):
    """Raised when the WiX compiler (candle) fails."""

    code = 11
    kind = "CompileFailed"
    stage = "Compiling"


class LinkFailed(ToolFailed):
    """Raised when the WiX linker (light) fails."""

    code = 12
    kind = "LinkFailed"
    stage = "Linking"


class SignFailed(ToolFailed):
    """Raised when signing the installer fails.

    The installer produced by the linker is left on disk, unsigned.

    Attributes:
        artifact: Path to the (unsigned) installer package.
    """

    code = 13
    kind = "SignFailed"
    stage = "Signing"

    def __init__(
        self,
        tool: str,
        status: int | None,
        output: str | None = None,
        artifact: Path | None = None,
    ) -> None:
        self.artifact = artifact
        super().__init__(tool, status, output)

    def _summary(self) -> str:
        summary = super()._summary()
        if self.artifact is not None:
            summary += f"; unsigned installer left at {self.artifact}"
        return summary
