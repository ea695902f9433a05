"""
Pytest configuration and shared fixtures for wixbuild tests.

This module provides reusable fixtures and test utilities used across
the test suite, including a recording stand-in for the process runner.
"""

from __future__ import annotations

from pathlib import Path
import sys
import textwrap
from typing import Any, Sequence

import pytest

from wixbuild.exceptions import ToolFailed, ToolNotFound
from wixbuild.results import StageResult


class RecordingRunner:
    """Runner double that records invocations instead of spawning processes.

    Args:
        fail: Tool name -> (exit status, captured output) for tools that
            should fail.
        missing: Tool names that should raise ToolNotFound.

    Successful 'light' and 'candle' calls create the file named by their
    '-out' argument, like the real tools would.
    """

    def __init__(
        self,
        fail: dict[str, tuple[int, str]] | None = None,
        missing: set[str] | None = None,
    ) -> None:
        self.fail = dict(fail or {})
        self.missing = set(missing or ())
        self.calls: list[tuple[str, list[str], bool]] = []

    def run(self, tool: str, args: Sequence[str], capture: bool = True) -> StageResult:
        args = [str(a) for a in args]
        self.calls.append((tool, args, capture))
        if tool in self.missing:
            raise ToolNotFound(tool)
        if tool in self.fail:
            status, output = self.fail[tool]
            raise ToolFailed(tool, status, output if capture else None)
        if "-out" in args:
            out = Path(args[args.index("-out") + 1])
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(b"fake " + tool.encode())
        return StageResult(
            tool=tool,
            executable=Path(tool),
            args=tuple(args),
            returncode=0,
            output="" if capture else None,
            elapsed=0.0,
        )

    def tools(self) -> list[str]:
        return [call[0] for call in self.calls]

    def args_for(self, tool: str) -> list[str]:
        for name, args, _ in self.calls:
            if name == tool:
                return args
        raise AssertionError(f"{tool} was not invoked")


@pytest.fixture
def recording_runner() -> RecordingRunner:
    """Provide a runner double where every tool succeeds."""
    return RecordingRunner()


@pytest.fixture
def sample_manifest_data() -> dict[str, Any]:
    """Provide the fields of a typical Cargo.toml [package] table."""
    return {
        "name": "example",
        "version": "1.2.3",
        "description": "An example program",
        "authors": ["Jane Doe <jane@example.com>", "John Roe"],
    }


def _toml_value(value: Any) -> str:
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@pytest.fixture
def create_cargo_project(tmp_path: Path, sample_manifest_data: dict[str, Any]):
    """
    Factory fixture for creating a Cargo project on disk.

    Usage:
        root = create_cargo_project()                       # sample data
        root = create_cargo_project(package={"name": "x"})  # custom package
        root = create_cargo_project(bins=["tool"])          # [[bin]] targets
    """

    def _create(
        package: dict[str, Any] | None = None,
        bins: list[str] | None = None,
        name: str = "project",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        fields = sample_manifest_data if package is None else package
        lines = ["[package]"]
        lines += [f"{key} = {_toml_value(value)}" for key, value in fields.items()]
        for bin_name in bins or []:
            lines += ["", "[[bin]]", f"name = {_toml_value(bin_name)}"]
        (root / "Cargo.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")
        return root.resolve()

    return _create


@pytest.fixture
def sample_context() -> dict[str, str]:
    """Provide a fully resolved template context."""
    return {
        "product-name": "example",
        "binary-name": "example",
        "manufacturer": "Jane Doe",
        "description": "An example program",
        "version": "1.2.3",
    }


@pytest.fixture
def fake_tool(tmp_path: Path):
    """
    Factory fixture for creating executable Python scripts that stand in
    for toolchain executables.

    Usage:
        fake_tool("candle", "print('hi'); sys.exit(1)")  # -> tmp/wix/bin/candle
    """
    if sys.platform == "win32":
        pytest.skip("fake tools are POSIX shebang scripts")

    def _create(name: str, body: str, root: Path | None = None) -> Path:
        root = root or tmp_path / "wix-toolset"
        bin_dir = root / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)
        script = bin_dir / name
        script.write_text(
            f"#!{sys.executable}\nimport sys\nfrom pathlib import Path\n"
            + textwrap.dedent(body)
            + "\n",
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    return _create
