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

"""Installer build pipeline for wixbuild.

This module orchestrates a complete installer build:

1. Read Cargo.toml and resolve installer metadata
2. Locate the WiX Source (or render the embedded template)
3. Compile it with candle into a .wixobj
4. Link the .wixobj with light into target/wix/<product>-<version>-<platform>.msi
5. Optionally sign the .msi with signtool

The build is an explicit state sequence:

    PENDING -> LOCATED -> COMPILED -> LINKED -> SIGNED | SKIPPED -> DONE

Each transition runs only after the previous one succeeded; any error stops
the build where it is and propagates. ``BuildPipeline.history`` records the
states that were reached.

Design Principles:
    - The release binary must already exist (cargo build --release)
    - Rendered sources and the .wixobj live in a private temporary
      directory that is removed whether the build succeeds or fails
    - A failed signature leaves the built .msi in place
    - Logger and runner are passed in, never global, so independent
      pipelines can coexist in one process

Example:
    from pathlib import Path
    from wixbuild.build import BuildPipeline
    from wixbuild.config import BuildConfiguration
    from wixbuild.logging import get_logger

    config = BuildConfiguration(project_root=Path("."), sign=True)
    result = BuildPipeline(config, logger=get_logger(verbosity=1)).run()
    print(result.package_path)
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
import platform as host
import re
import tempfile
from typing import Callable

from wixbuild.build.runner import ProcessRunner, Runner
from wixbuild.build.signing import sign
from wixbuild.build.source import AuthoringSource, locate
from wixbuild.build.template import GUID_PLACEHOLDER, find_reserved
from wixbuild.config.options import BuildConfiguration
from wixbuild.exceptions import (
    CompileFailed,
    ConfigError,
    LinkFailed,
    ToolFailed,
    WixIoError,
)
from wixbuild.logging import Logger, get_logger
from wixbuild.manifest import (
    ProjectDescriptor,
    find_project_root,
    read_manifest,
    resolve,
)
from wixbuild.results import BuildResult, StageResult

COMPILER = "candle"
LINKER = "light"

PLATFORMS = ("x86", "x64")
OUTPUT_DIR = Path("target") / "wix"
BINARY_DIR = Path("target") / "release"

# MSI ProductVersion is major.minor.build; anything after it is dropped.
_MSI_VERSION = re.compile(r"^\d+(\.\d+){0,2}")

# Characters Windows does not allow in file names, path separators included.
_UNSAFE_FILE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class BuildState(Enum):
    PENDING = "pending"
    LOCATED = "located"
    COMPILED = "compiled"
    LINKED = "linked"
    SIGNED = "signed"
    SKIPPED = "skipped"
    DONE = "done"


def host_platform() -> str:
    """Return the WiX platform name for the current machine."""
    machine = host.machine().lower()
    return "x64" if machine in ("amd64", "x86_64") else "x86"


def msi_version(version: str) -> str:
    """Reduce a Cargo version to the numeric form MSI accepts.

    Example:
        >>> msi_version("1.2.3-beta.1+build.5")
        '1.2.3'
    """
    match = _MSI_VERSION.match(version)
    if not match:
        raise ConfigError(f"Version '{version}' cannot be used as an MSI version")
    return match.group(0)


class BuildPipeline:
    """Builds one installer package.

    Args:
        config: Build options. Settings files should already be applied.
        runner: Runs toolchain executables. Default: a ProcessRunner using
            config.toolchain_root and config.signtool_root.
        logger: Logger for progress output. Default: a DefaultLogger at
            config.verbosity.

    Attributes:
        state: The last state reached.
        history: Every state reached, in order.
        stages: StageResults of the toolchain invocations so far.
    """

    def __init__(
        self,
        config: BuildConfiguration,
        runner: Runner | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger if logger is not None else get_logger(config.verbosity)
        if runner is None:
            tool_roots = {}
            if config.signtool_root is not None:
                tool_roots["signtool"] = config.signtool_root
            runner = ProcessRunner(
                toolchain_root=config.toolchain_root,
                tool_roots=tool_roots,
                logger=self.logger,
            )
        self.runner = runner

        self.state = BuildState.PENDING
        self.history: list[BuildState] = [BuildState.PENDING]
        self.stages: list[StageResult] = []

        self._transitions: dict[BuildState, Callable[[], BuildState]] = {
            BuildState.PENDING: self._locate,
            BuildState.LOCATED: self._compile,
            BuildState.COMPILED: self._link,
            BuildState.LINKED: self._sign,
            BuildState.SIGNED: self._finish,
            BuildState.SKIPPED: self._finish,
        }
        self._total_steps = 5 if config.sign else 4

        self.descriptor: ProjectDescriptor | None = None
        self.context: dict[str, str] = {}
        self.platform = ""
        self.source: AuthoringSource | None = None
        self.package_path: Path | None = None
        self._work_dir: Path | None = None
        self._source_path: Path | None = None
        self._object_path: Path | None = None

    def run(self) -> BuildResult:
        """Run every stage in order.

        Returns:
            BuildResult describing the produced package.

        Raises:
            ManifestError, MissingMetadata, UnresolvedPlaceholder,
            SourceNotFound: Before any tool runs.
            ToolNotFound: If candle or light cannot be located.
            CompileFailed, LinkFailed: If candle or light fail.
            SignFailed: If signing fails; the .msi is left on disk.
        """
        if self.state is not BuildState.PENDING:
            raise RuntimeError("BuildPipeline.run() can only be called once")

        with tempfile.TemporaryDirectory(prefix="wixbuild-") as work_dir:
            self._work_dir = Path(work_dir)
            try:
                while self.state is not BuildState.DONE:
                    self._advance(self._transitions[self.state]())
            finally:
                self._work_dir = None

        return BuildResult(
            package_path=self.package_path,
            product_name=self.context["product-name"],
            version=self.context["version"],
            platform=self.platform,
            signed=BuildState.SIGNED in self.history,
            stages=tuple(self.stages),
            status="success",
        )

    def _advance(self, state: BuildState) -> None:
        self.logger.debug("BUILD", f"{self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    # -------------------------------
    # Stages
    # -------------------------------

    def _locate(self) -> BuildState:
        self.logger.step(1, self._total_steps, "Reading manifest...")
        root = self.config.project_root
        root = find_project_root(Path.cwd()) if root is None else Path(root).resolve()
        self.descriptor = read_manifest(root)
        self.context = resolve(self.descriptor, self.config)
        self.platform = self.config.platform or host_platform()
        if self.platform not in PLATFORMS:
            raise ConfigError(
                f"Unsupported platform '{self.platform}'. "
                f"Supported: {', '.join(PLATFORMS)}"
            )
        for key, value in self.context.items():
            self.logger.debug("BUILD", f"  {key} = {value}")

        self.logger.step(2, self._total_steps, "Locating WiX source...")
        self.source = locate(self.config, self.context, root, logger=self.logger)
        self._source_path = self.source.materialize(self._work_dir)
        self._warn_reserved()
        return BuildState.LOCATED

    def _compile(self) -> BuildState:
        self.logger.step(3, self._total_steps, "Compiling WiX source...")
        self._object_path = self._work_dir / "main.wixobj"
        try:
            result = self.runner.run(
                COMPILER, self.compiler_args(), self.config.capture_output
            )
        except ToolFailed as err:
            raise CompileFailed.from_failure(err) from err
        self.stages.append(result)
        return BuildState.COMPILED

    def _link(self) -> BuildState:
        self.logger.step(4, self._total_steps, "Linking installer...")
        output_dir = self.descriptor.root / OUTPUT_DIR
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise WixIoError(f"Could not create {output_dir}: {err}") from err
        self.package_path = output_dir / self.package_name()
        try:
            result = self.runner.run(
                LINKER, self.linker_args(), self.config.capture_output
            )
        except ToolFailed as err:
            raise LinkFailed.from_failure(err) from err
        self.stages.append(result)
        self.logger.verbose("BUILD", f"[OK] Created: {self.package_path}")
        return BuildState.LINKED

    def _sign(self) -> BuildState:
        if not self.config.sign:
            self.logger.verbose("SIGN", "Signing not requested")
            return BuildState.SKIPPED
        self.logger.step(5, self._total_steps, "Signing installer...")
        result = sign(
            self.runner,
            self.package_path,
            timestamp=self.config.effective_timestamp,
            description=self.context["product-name"],
            capture=self.config.capture_output,
            logger=self.logger,
        )
        self.stages.append(result)
        self.logger.verbose("SIGN", f"[OK] Signed: {self.package_path.name}")
        return BuildState.SIGNED

    def _finish(self) -> BuildState:
        self.logger.verbose("BUILD", f"[OK] Build complete: {self.package_path}")
        return BuildState.DONE

    # -------------------------------
    # Tool arguments
    # -------------------------------

    def package_name(self) -> str:
        """File name of the installer, e.g. example-1.0.0-x64.msi.

        Path separators and other characters Windows rejects in file names
        are replaced with underscores, so the package always lands directly
        in target/wix.
        """
        name = (
            f"{self.context['product-name']}-{self.context['version']}"
            f"-{self.platform}.msi"
        )
        return _UNSAFE_FILE_CHARS.sub("_", name)

    def _metadata_defines(self) -> list[str]:
        return [
            f"-dProductName={self.context['product-name']}",
            f"-dManufacturer={self.context['manufacturer']}",
            f"-dDescription={self.context['description']}",
        ]

    def compiler_args(self) -> list[str]:
        """Arguments for candle."""
        return [
            "-nologo",
            f"-dVersion={msi_version(self.context['version'])}",
            f"-dPlatform={self.platform}",
            f"-dBinaryName={self.context['binary-name']}",
            *self._metadata_defines(),
            f"-dCargoTargetBinDir={self.descriptor.root / BINARY_DIR}",
            "-arch",
            self.platform,
            "-ext",
            "WixUtilExtension",
            "-out",
            str(self._object_path),
            str(self._source_path),
        ]

    def linker_args(self) -> list[str]:
        """Arguments for light."""
        return [
            "-nologo",
            "-ext",
            "WixUIExtension",
            "-ext",
            "WixUtilExtension",
            "-cultures:en-us",
            *self._metadata_defines(),
            "-out",
            str(self.package_path),
            str(self._object_path),
        ]

    def _warn_reserved(self) -> None:
        if self.source.in_memory:
            text = self.source.text
        else:
            try:
                text = self.source.path.read_text(encoding="utf-8", errors="replace")
            except OSError as err:
                raise WixIoError(f"Could not read {self.source.path}: {err}") from err
        count = find_reserved(text)
        if count:
            self.logger.warning(
                f"{count} '{GUID_PLACEHOLDER}' placeholder(s) remain in the WiX "
                f"source; replace them with GUIDs (see 'wixbuild --init')"
            )
