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

"""Public API return types for wixbuild.

This module defines dataclasses for return values from public API functions.
All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from wixbuild.build import BuildPipeline
        from wixbuild.results import BuildResult

        result: BuildResult = BuildPipeline(config).run()
        print(result.package_path)  # Attribute access, not dict access
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like ProjectDescriptor or AuthoringSource) remain co-located with
    their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StageResult:
    """Outcome of one toolchain invocation.

    Attributes:
        tool: Tool name as requested (e.g., "candle").
        executable: Resolved path of the executable that was run.
        args: Arguments passed to the tool (excluding the executable).
        returncode: Process exit status.
        output: Combined stdout/stderr when captured, else None.
        elapsed: Wall-clock duration in seconds.
    """

    tool: str
    executable: Path
    args: tuple[str, ...]
    returncode: int
    output: str | None
    elapsed: float

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class BuildResult:
    """Result from building an installer package.

    Attributes:
        package_path: Path to the produced .msi file.
        product_name: Product name written into the installer.
        version: Product version.
        platform: WiX platform identifier ("x86" or "x64").
        signed: True if the package was signed.
        stages: Toolchain invocations in the order they ran.
        status: Build status (typically "success").
    """

    package_path: Path
    product_name: str
    version: str
    platform: str
    signed: bool
    stages: tuple[StageResult, ...]
    status: str
