"""Build options assembled before the pipeline runs.

BuildConfiguration collects everything the CLI (or a programmatic caller)
can override. It is a plain mutable dataclass: fields are filled from
command-line flags first, then from settings files for whatever is still
unset (see ``wixbuild.config.loader.apply_settings``).

Example:
    from pathlib import Path
    from wixbuild.config import BuildConfiguration

    config = BuildConfiguration(product_name="Example", sign=True)
    config.timestamp = "http://timestamp.digicert.com"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class BuildConfiguration:
    """Overrides and switches for one build.

    Attributes:
        binary_name: Overrides the manifest's primary binary name.
        description: Overrides the manifest's description.
        manufacturer: Overrides the first manifest author.
        product_name: Overrides the manifest's package name.
        input: Explicit WiX source file. Default is wix/main.wxs or the
            embedded template.
        sign: Sign the installer with signtool after linking.
        timestamp: Timestamp server URL. Ignored unless sign is set.
        capture_output: Hide toolchain output unless a tool fails.
        verbosity: Number of -v flags.
        project_root: Directory holding Cargo.toml. Default: search upward
            from the current directory.
        toolchain_root: WiX Toolset installation directory. Default: the
            WIX environment variable.
        signtool_root: Directory holding signtool. Default: PATH.
        platform: "x86" or "x64". Default: the host architecture.
    """

    binary_name: str | None = None
    description: str | None = None
    manufacturer: str | None = None
    product_name: str | None = None
    input: Path | None = None
    sign: bool = False
    timestamp: str | None = None
    capture_output: bool = True
    verbosity: int = 0
    project_root: Path | None = None
    toolchain_root: Path | None = None
    signtool_root: Path | None = None
    platform: str | None = None

    @property
    def effective_timestamp(self) -> str | None:
        """Timestamp URL to pass to the signer, honored only when signing."""
        return self.timestamp if self.sign and self.timestamp else None
