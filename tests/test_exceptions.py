"""
Tests for wixbuild.exceptions module.

Tests the error taxonomy including:
- Stable exit codes per error kind
- Messages carrying tool output
- Stage relabeling of runner failures
"""

from __future__ import annotations

from pathlib import Path

import pytest

from wixbuild import exceptions
from wixbuild.exceptions import (
    CompileFailed,
    ConfigError,
    FileExists,
    LinkFailed,
    ManifestError,
    MissingMetadata,
    SignFailed,
    SourceNotFound,
    ToolFailed,
    ToolNotFound,
    UnresolvedPlaceholder,
    WixBuildError,
    WixIoError,
)

pytestmark = pytest.mark.unit


class TestCodes:
    """Tests for the exit code mapping."""

    def test_codes_are_stable(self):
        assert {
            WixBuildError: 1,
            WixIoError: 3,
            ConfigError: 4,
            ManifestError: 4,
            MissingMetadata: 5,
            UnresolvedPlaceholder: 6,
            SourceNotFound: 7,
            FileExists: 8,
            ToolNotFound: 9,
            ToolFailed: 10,
            CompileFailed: 11,
            LinkFailed: 12,
            SignFailed: 13,
        } == {cls: cls.code for cls in (
            WixBuildError, WixIoError, ConfigError, ManifestError, MissingMetadata,
            UnresolvedPlaceholder, SourceNotFound, FileExists, ToolNotFound,
            ToolFailed, CompileFailed, LinkFailed, SignFailed,
        )}

    def test_kinds_are_unique(self):
        kinds = [getattr(exceptions, name).kind for name in exceptions.__all__]

        assert len(kinds) == len(set(kinds))

    def test_usage_code_is_reserved(self):
        """Test that no error collides with argparse's exit status 2."""
        codes = [getattr(exceptions, name).code for name in exceptions.__all__]

        assert 2 not in codes
        assert 0 not in codes

    def test_all_inherit_from_base(self):
        for name in exceptions.__all__:
            assert issubclass(getattr(exceptions, name), WixBuildError)


class TestToolFailed:
    """Tests for tool failure messages."""

    def test_message_includes_output(self):
        err = ToolFailed("candle", 1, "line one\nline two\n")

        assert str(err) == "Running with 'candle' failed (exit status 1)\nline one\nline two"

    def test_message_without_output(self):
        assert str(ToolFailed("light", 2)) == "Running with 'light' failed (exit status 2)"

    def test_not_started(self):
        assert "(not started)" in str(SignFailed("signtool", None))

    def test_from_failure_relabels(self):
        err = LinkFailed.from_failure(ToolFailed("light", 3, "oops"))

        assert isinstance(err, LinkFailed)
        assert err.tool == "light"
        assert err.status == 3
        assert str(err).startswith("Linking with 'light' failed")
        assert "oops" in str(err)

    def test_sign_failed_keeps_artifact(self):
        err = SignFailed.from_failure(
            ToolFailed("signtool", 1), artifact=Path("a.msi")
        )

        assert err.artifact == Path("a.msi")

    def test_sign_failed_names_artifact(self):
        err = SignFailed("signtool", 1, "No certificates", artifact=Path("a.msi"))

        assert str(err).splitlines() == [
            "Signing with 'signtool' failed (exit status 1); "
            "unsigned installer left at a.msi",
            "No certificates",
        ]
