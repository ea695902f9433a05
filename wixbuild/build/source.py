"""WiX Source discovery and initialization for wixbuild.

Decides which WiX Source (wxs) document a build compiles, and writes the
starter document for ``wixbuild --init``.

Lookup order for a build:
    1. The explicit input path, if given (must exist)
    2. <project root>/wix/main.wxs, if present
    3. The embedded template, rendered in memory

Design Principles:
    - Never overwrite an existing wix/main.wxs unless forced
    - --init and --print-template produce byte-identical documents for
      the same context
    - A located source is never modified

Example:
    from pathlib import Path
    from wixbuild.build.source import init, locate

    init(Path("."), context)                 # creates wix/main.wxs
    source = locate(config, context)         # finds it again
    print(source.path)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sys
from typing import Mapping, TextIO

from wixbuild.build.template import load_default_template, render
from wixbuild.config.options import BuildConfiguration
from wixbuild.exceptions import FileExists, SourceNotFound, WixIoError
from wixbuild.logging import Logger, SilentLogger

WIX_DIR = "wix"
DEFAULT_SOURCE = Path(WIX_DIR) / "main.wxs"


@dataclass(frozen=True)
class AuthoringSource:
    """A WiX Source document: a file on disk or rendered text.

    Exactly one of 'path' and 'text' is set.

    Attributes:
        path: Existing .wxs file.
        text: Rendered document not yet written anywhere.
    """

    path: Path | None = None
    text: str | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.text is None):
            raise ValueError("AuthoringSource needs exactly one of path or text")

    @property
    def in_memory(self) -> bool:
        return self.text is not None

    def materialize(self, directory: Path) -> Path:
        """Return a file path the compiler can read.

        File sources are returned as-is. In-memory sources are written to
        'directory' as main.wxs.
        """
        if self.path is not None:
            return self.path
        target = directory / DEFAULT_SOURCE.name
        try:
            target.write_text(self.text, encoding="utf-8")
        except OSError as err:
            raise WixIoError(f"Could not write {target}: {err}") from err
        return target


def render_default(context: Mapping[str, str]) -> str:
    """Render the embedded template with 'context'."""
    return render(load_default_template(), context)


def locate(
    config: BuildConfiguration,
    context: Mapping[str, str],
    project_root: Path,
    logger: Logger | None = None,
) -> AuthoringSource:
    """Determine the WiX Source for a build.

    Args:
        config: Build options (only 'input' is consulted).
        context: Template context, used when falling back to the template.
        project_root: Directory holding Cargo.toml.
        logger: Logger for progress output. Default is silent.

    Returns:
        The located or rendered source.

    Raises:
        SourceNotFound: If an explicit input path does not exist.
        UnresolvedPlaceholder: If the embedded template cannot be rendered.
    """
    if logger is None:
        logger = SilentLogger()

    if config.input is not None:
        path = Path(config.input).resolve()
        if not path.is_file():
            raise SourceNotFound(path)
        logger.verbose("SOURCE", f"Using WiX source: {path}")
        return AuthoringSource(path=path)

    default = project_root / DEFAULT_SOURCE
    if default.is_file():
        logger.verbose("SOURCE", f"Using WiX source: {default}")
        return AuthoringSource(path=default)

    logger.verbose("SOURCE", f"No {DEFAULT_SOURCE} found, using embedded template")
    return AuthoringSource(text=render_default(context))


def init(
    project_root: Path,
    context: Mapping[str, str],
    force: bool = False,
    logger: Logger | None = None,
) -> Path:
    """Write the rendered template to <project root>/wix/main.wxs.

    Args:
        project_root: Directory holding Cargo.toml.
        context: Template context.
        force: Overwrite an existing file.
        logger: Logger for progress output. Default is silent.

    Returns:
        Path of the written file.

    Raises:
        FileExists: If the file exists and 'force' is False. The existing
            file is left untouched.
        WixIoError: If the directory or file cannot be written.
    """
    if logger is None:
        logger = SilentLogger()

    target = project_root / DEFAULT_SOURCE
    if target.exists() and not force:
        raise FileExists(target)

    # Render before touching the filesystem so a bad context writes nothing.
    document = render_default(context)
    # "x" fails if the file appeared since the check above.
    mode = "w" if force else "x"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the bytes identical to --print-template output.
        with target.open(mode, encoding="utf-8", newline="") as f:
            f.write(document)
    except FileExistsError as err:
        raise FileExists(target) from err
    except OSError as err:
        raise WixIoError(f"Could not write {target}: {err}") from err

    logger.verbose("INIT", f"Wrote {target}")
    return target


def print_template(context: Mapping[str, str], stream: TextIO | None = None) -> None:
    """Write the rendered template to 'stream' (default: stdout)."""
    if stream is None:
        stream = sys.stdout
    stream.write(render_default(context))
    stream.flush()
