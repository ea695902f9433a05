"""Project manifest reading and installer metadata resolution.

Reads a Cargo project's manifest (Cargo.toml) into an immutable
ProjectDescriptor and resolves the values written into the installer,
applying overrides from BuildConfiguration.

Resolution precedence, per field:

    override (non-empty) > manifest value > fallback > MissingMetadata

| Placeholder    | Manifest source             | Fallback                 |
| -------------- | --------------------------- | ------------------------ |
| product-name   | package.name                |                          |
| binary-name    | first [[bin]] name          | package.name             |
| manufacturer   |                             | first of package.authors |
| description    | package.description         | empty string             |
| version        | package.version             |                          |

Example:
    from pathlib import Path
    from wixbuild.config import BuildConfiguration
    from wixbuild.manifest import find_project_root, read_manifest, resolve

    descriptor = read_manifest(find_project_root(Path.cwd()))
    context = resolve(descriptor, BuildConfiguration(manufacturer="Acme"))
    print(context["manufacturer"])  # Acme
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import tomllib
from typing import Any

from wixbuild.config.options import BuildConfiguration
from wixbuild.exceptions import ManifestError, MissingMetadata, WixIoError

MANIFEST_NAME = "Cargo.toml"

# "Jane Doe <jane@example.com>" -> "Jane Doe"
_AUTHOR_EMAIL = re.compile(r"\s*<[^>]*>\s*$")


@dataclass(frozen=True)
class ProjectDescriptor:
    """Metadata read from the project manifest.

    Attributes:
        name: Package name.
        version: Package version string.
        description: Package description, if any.
        authors: Package authors in manifest order.
        binary_name: Name of the primary binary target.
        root: Directory holding the manifest.
    """

    name: str
    version: str
    description: str | None
    authors: tuple[str, ...]
    binary_name: str
    root: Path


def find_project_root(start: Path) -> Path:
    """Walk upward from 'start' to the first directory holding Cargo.toml.

    Raises:
        ManifestError: If no manifest is found.
    """
    start = start.resolve()
    for parent in [start] + list(start.parents):
        if (parent / MANIFEST_NAME).is_file():
            return parent
    raise ManifestError(f"Could not find {MANIFEST_NAME} in {start} or any parent")


def _as_string(value: Any, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestError(f"Manifest field '{field}' must be a string")
    return value


def read_manifest(root: Path) -> ProjectDescriptor:
    """Parse <root>/Cargo.toml into a ProjectDescriptor.

    Workspace-inherited fields (``version.workspace = true``) are not
    followed; such fields are treated as absent.

    Raises:
        WixIoError: If the manifest cannot be read.
        ManifestError: If the manifest is not valid TOML or has no
            [package] table.
    """
    path = root / MANIFEST_NAME
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as err:
        raise ManifestError(f"Manifest not found: {path}") from err
    except OSError as err:
        raise WixIoError(f"Could not read manifest {path}: {err}") from err
    except tomllib.TOMLDecodeError as err:
        raise ManifestError(f"Error parsing TOML: {path}: {err}") from err

    package = data.get("package")
    if not isinstance(package, dict):
        raise ManifestError(f"No [package] table in {path}")

    name = _as_string(package.get("name"), "package.name") or ""
    version = package.get("version")
    version = version if isinstance(version, str) else ""
    description = package.get("description")
    description = description if isinstance(description, str) else None

    authors = package.get("authors") or []
    if not isinstance(authors, list):
        authors = []

    binary_name = name
    bins = data.get("bin")
    if isinstance(bins, list):
        for target in bins:
            if isinstance(target, dict) and target.get("name"):
                binary_name = _as_string(target["name"], "bin.name") or name
                break

    return ProjectDescriptor(
        name=name,
        version=version,
        description=description,
        authors=tuple(str(a) for a in authors),
        binary_name=binary_name,
        root=root,
    )


def _first(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate:
            return candidate
    return None


def manufacturer_from_author(author: str) -> str:
    """Strip a trailing e-mail address from a manifest author entry."""
    return _AUTHOR_EMAIL.sub("", author).strip()


def resolve(
    descriptor: ProjectDescriptor, overrides: BuildConfiguration
) -> dict[str, str]:
    """Resolve installer metadata from the manifest and overrides.

    Args:
        descriptor: Parsed project manifest.
        overrides: Build options; empty strings count as unset.

    Returns:
        Template context mapping placeholder name to value.

    Raises:
        MissingMetadata: If product name, binary name, manufacturer or
            version cannot be determined.
    """
    first_author = (
        manufacturer_from_author(descriptor.authors[0]) if descriptor.authors else None
    )

    context = {
        "product-name": _first(overrides.product_name, descriptor.name),
        "binary-name": _first(overrides.binary_name, descriptor.binary_name),
        "manufacturer": _first(overrides.manufacturer, first_author),
        "version": _first(descriptor.version),
    }
    for field, value in context.items():
        if value is None:
            raise MissingMetadata(field)

    context["description"] = _first(overrides.description, descriptor.description) or ""
    return context
