"""
Tests for wixbuild.manifest module.

Tests manifest reading and metadata resolution including:
- Cargo.toml parsing
- Project root discovery
- Override precedence
- Manufacturer fallback to the first author
- Missing metadata errors
"""

from __future__ import annotations

import pytest

from wixbuild.config import BuildConfiguration
from wixbuild.exceptions import ManifestError, MissingMetadata
from wixbuild.manifest import (
    ProjectDescriptor,
    find_project_root,
    manufacturer_from_author,
    read_manifest,
    resolve,
)

pytestmark = pytest.mark.unit


def _descriptor(tmp_path, **fields) -> ProjectDescriptor:
    values = {
        "name": "example",
        "version": "1.2.3",
        "description": "An example program",
        "authors": ("Jane Doe <jane@example.com>",),
        "binary_name": "example",
        "root": tmp_path,
    }
    values.update(fields)
    return ProjectDescriptor(**values)


class TestReadManifest:
    """Tests for parsing Cargo.toml."""

    def test_reads_package_fields(self, create_cargo_project):
        """Test that package metadata is read in manifest order."""
        root = create_cargo_project()

        descriptor = read_manifest(root)

        assert descriptor.name == "example"
        assert descriptor.version == "1.2.3"
        assert descriptor.description == "An example program"
        assert descriptor.authors == ("Jane Doe <jane@example.com>", "John Roe")
        assert descriptor.root == root

    def test_binary_name_defaults_to_package_name(self, create_cargo_project):
        """Test binary name fallback when there are no [[bin]] targets."""
        root = create_cargo_project()

        assert read_manifest(root).binary_name == "example"

    def test_binary_name_from_first_bin_target(self, create_cargo_project):
        """Test that the first [[bin]] target wins."""
        root = create_cargo_project(bins=["example-cli", "helper"])

        assert read_manifest(root).binary_name == "example-cli"

    def test_missing_optional_fields(self, create_cargo_project):
        """Test manifest without description or authors."""
        root = create_cargo_project(package={"name": "bare", "version": "0.1.0"})

        descriptor = read_manifest(root)

        assert descriptor.description is None
        assert descriptor.authors == ()

    def test_invalid_toml_raises(self, tmp_path):
        """Test that malformed TOML is a ManifestError."""
        (tmp_path / "Cargo.toml").write_text("[package\nname = ", encoding="utf-8")

        with pytest.raises(ManifestError, match="Error parsing TOML"):
            read_manifest(tmp_path)

    def test_missing_package_table_raises(self, tmp_path):
        """Test that a workspace-only manifest is rejected."""
        (tmp_path / "Cargo.toml").write_text(
            '[workspace]\nmembers = ["a"]\n', encoding="utf-8"
        )

        with pytest.raises(ManifestError, match=r"No \[package\] table"):
            read_manifest(tmp_path)

    def test_missing_manifest_raises(self, tmp_path):
        """Test that a directory without Cargo.toml is rejected."""
        with pytest.raises(ManifestError, match="Manifest not found"):
            read_manifest(tmp_path)


class TestFindProjectRoot:
    """Tests for walking upward to Cargo.toml."""

    def test_finds_manifest_in_parent(self, create_cargo_project):
        """Test discovery from a nested directory."""
        root = create_cargo_project()
        nested = root / "src" / "bin"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == root.resolve()

    def test_no_manifest_raises(self, tmp_path):
        """Test error when no ancestor holds Cargo.toml."""
        empty = tmp_path / "empty"
        empty.mkdir()

        if any((p / "Cargo.toml").is_file() for p in empty.resolve().parents):
            pytest.skip("a Cargo.toml exists above the temporary directory")
        with pytest.raises(ManifestError, match="Could not find Cargo.toml"):
            find_project_root(empty)


class TestResolve:
    """Tests for metadata resolution and override precedence."""

    def test_manifest_values_pass_through_unchanged(self, tmp_path):
        """Test that empty overrides keep the manifest's own values."""
        descriptor = _descriptor(tmp_path, name="my-app", binary_name="my-app-cli")

        context = resolve(descriptor, BuildConfiguration())

        assert context["product-name"] == "my-app"
        assert context["binary-name"] == "my-app-cli"
        assert context["version"] == "1.2.3"
        assert context["description"] == "An example program"

    def test_overrides_win(self, tmp_path):
        """Test that non-empty overrides replace manifest values."""
        overrides = BuildConfiguration(
            product_name="My Product",
            binary_name="other",
            manufacturer="Acme Corp",
            description="Overridden",
        )

        context = resolve(_descriptor(tmp_path), overrides)

        assert context["product-name"] == "My Product"
        assert context["binary-name"] == "other"
        assert context["manufacturer"] == "Acme Corp"
        assert context["description"] == "Overridden"

    def test_empty_override_is_ignored(self, tmp_path):
        """Test that an empty string does not count as an override."""
        context = resolve(_descriptor(tmp_path), BuildConfiguration(product_name=""))

        assert context["product-name"] == "example"

    def test_manufacturer_from_first_author(self, tmp_path):
        """Test manufacturer fallback strips the e-mail address."""
        descriptor = _descriptor(
            tmp_path, authors=("Jane Doe <jane@example.com>", "John Roe")
        )

        assert resolve(descriptor, BuildConfiguration())["manufacturer"] == "Jane Doe"

    def test_no_authors_and_no_override_raises(self, tmp_path):
        """Test that manufacturer is mandatory."""
        descriptor = _descriptor(tmp_path, authors=())

        with pytest.raises(MissingMetadata) as exc_info:
            resolve(descriptor, BuildConfiguration())

        assert exc_info.value.field == "manufacturer"

    def test_no_authors_with_override(self, tmp_path):
        """Test that an override satisfies the manufacturer requirement."""
        descriptor = _descriptor(tmp_path, authors=())

        context = resolve(descriptor, BuildConfiguration(manufacturer="Acme"))

        assert context["manufacturer"] == "Acme"

    def test_missing_product_name_raises(self, tmp_path):
        """Test that product name is mandatory."""
        descriptor = _descriptor(tmp_path, name="", binary_name="tool")

        with pytest.raises(MissingMetadata) as exc_info:
            resolve(descriptor, BuildConfiguration())

        assert exc_info.value.field == "product-name"

    def test_missing_binary_name_uses_override(self, tmp_path):
        """Test binary name from override when manifest has none."""
        descriptor = _descriptor(tmp_path, binary_name="")

        context = resolve(descriptor, BuildConfiguration(binary_name="tool"))

        assert context["binary-name"] == "tool"

    def test_missing_description_is_empty(self, tmp_path):
        """Test that description is optional."""
        descriptor = _descriptor(tmp_path, description=None)

        assert resolve(descriptor, BuildConfiguration())["description"] == ""


class TestManufacturerFromAuthor:
    """Tests for author string cleanup."""

    @pytest.mark.parametrize(
        ("author", "expected"),
        [
            ("Jane Doe <jane@example.com>", "Jane Doe"),
            ("Jane Doe", "Jane Doe"),
            ("  Acme <>  ", "Acme"),
        ],
    )
    def test_strip_email(self, author, expected):
        assert manufacturer_from_author(author) == expected
