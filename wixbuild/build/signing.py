"""Installer signing for wixbuild.

Signs a built installer with Microsoft's signtool. The certificate is picked
automatically from the local certificate store (``/a``); a timestamp server
is used only when one is configured.

    signtool sign /a [/d <description>] [/t <timestamp url>] <package.msi>

Signing is never retried. A failed signature leaves the unsigned installer
in place and raises SignFailed pointing at it.
"""

from __future__ import annotations

from pathlib import Path

from wixbuild.build.runner import Runner
from wixbuild.exceptions import SignFailed, ToolFailed, ToolNotFound
from wixbuild.logging import Logger, SilentLogger
from wixbuild.results import StageResult

SIGNER = "signtool"


def signtool_args(
    artifact: Path, timestamp: str | None = None, description: str | None = None
) -> list[str]:
    """Build the signtool argument list."""
    args = ["sign", "/a"]
    if description:
        args += ["/d", description]
    if timestamp:
        args += ["/t", timestamp]
    args.append(str(artifact))
    return args


def sign(
    runner: Runner,
    artifact: Path,
    timestamp: str | None = None,
    description: str | None = None,
    capture: bool = True,
    logger: Logger | None = None,
) -> StageResult:
    """Sign an installer package in place.

    Args:
        runner: Runner used to invoke signtool.
        artifact: Installer to sign.
        timestamp: Timestamp server URL, if any.
        description: Description shown in the signature (``/d``).
        capture: Hide signtool output unless it fails.
        logger: Logger for progress output. Default is silent.

    Returns:
        The signtool StageResult.

    Raises:
        SignFailed: If signtool is missing or exits non-zero. The
            exception's 'artifact' attribute names the unsigned package.
    """
    if logger is None:
        logger = SilentLogger()

    if timestamp:
        logger.verbose("SIGN", f"Using timestamp server: {timestamp}")
    try:
        return runner.run(
            SIGNER, signtool_args(artifact, timestamp, description), capture
        )
    except ToolFailed as err:
        raise SignFailed.from_failure(err, artifact=artifact) from err
    except ToolNotFound as err:
        raise SignFailed(err.tool, None, str(err), artifact=artifact) from err
