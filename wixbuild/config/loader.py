"""
Settings file loading and merging for wixbuild.

Settings are optional YAML files that supply defaults for options the
command line leaves unset. Two layers are read, last wins:

1. **User defaults** ($WIXBUILD_CONFIG, or ~/.config/wixbuild/config.yaml)
   - Machine-wide toolchain locations and signing defaults
2. **Project settings** (<project root>/wix/wixbuild.yaml)
   - Checked in next to wix/main.wxs
   - Overrides user defaults

Merge Behavior
--------------
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Recognized Keys
---------------
    toolchain:
      wix_root: C:/Program Files (x86)/WiX Toolset v3.11
      signtool_root: C:/Program Files (x86)/Windows Kits/10/bin/x64
    sign:
      timestamp: http://timestamp.digicert.com
    package:
      product_name: Example
      manufacturer: Example Inc.
      description: An example program
      binary_name: example
    build:
      platform: x64

Relative toolchain paths are resolved against the directory of the file
that declared them.

Error Handling
--------------
- ConfigError: YAML parse errors, non-mapping documents, wrong value types
- Missing settings files are not errors
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from wixbuild.config.options import BuildConfiguration
from wixbuild.exceptions import ConfigError, WixIoError
from wixbuild.logging import Logger, SilentLogger

PROJECT_SETTINGS = Path("wix") / "wixbuild.yaml"
USER_SETTINGS_ENV = "WIXBUILD_CONFIG"

_PACKAGE_FIELDS = ("product_name", "manufacturer", "description", "binary_name")
_TOOLCHAIN_PATHS = ("wix_root", "signtool_root")


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML settings file and return the parsed mapping.

    An empty file yields an empty mapping.

    Raises:
      ConfigError  - for invalid YAML or a non-mapping document
      WixIoError   - when the file exists but cannot be read
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise WixIoError(f"Could not read settings file {p}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {p}")
    return data


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def _resolve_known_paths(settings: dict[str, Any], base_dir: Path) -> None:
    """
    Resolve relative toolchain paths against 'base_dir'.

    Currently handled:
      - settings["toolchain"]["wix_root"]
      - settings["toolchain"]["signtool_root"]

    Modifies settings in place.
    """
    toolchain = settings.get("toolchain")
    if not isinstance(toolchain, dict):
        return
    for key in _TOOLCHAIN_PATHS:
        raw_path = toolchain.get(key)
        if isinstance(raw_path, str) and raw_path:
            p = Path(raw_path).expanduser()
            if not p.is_absolute():
                p = (base_dir / p).resolve()
            toolchain[key] = str(p)


def user_settings_path() -> Path:
    """Return the location of the user-level settings file."""
    override = os.environ.get(USER_SETTINGS_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "wixbuild" / "config.yaml"


# -------------------------------
# Public API
# -------------------------------


def load_settings(
    project_root: Path,
    *,
    user_path: Path | None = None,
    logger: Logger | None = None,
) -> dict[str, Any]:
    """
    Load and merge the settings files that apply to a project.

    Args:
        project_root: Directory holding Cargo.toml.
        user_path: User-level settings file. Default: user_settings_path().
        logger: Logger for progress output. Default is silent.

    Returns:
        The merged settings mapping (empty if no files exist).

    Raises:
        ConfigError: If a settings file is not valid YAML or not a mapping.
    """
    if logger is None:
        logger = SilentLogger()
    if user_path is None:
        user_path = user_settings_path()

    merged: dict[str, Any] = {}
    for path in (user_path, project_root / PROJECT_SETTINGS):
        if not path.is_file():
            logger.debug("CONFIG", f"No settings at {path}")
            continue
        logger.verbose("CONFIG", f"Loading: {path}")
        layer = _load_yaml_file(path)
        _resolve_known_paths(layer, path.parent)
        merged = _deep_merge_dicts(merged, layer)

    if merged:
        logger.debug("CONFIG", f"Settings keys: {', '.join(merged)}")
    return merged


def _section(settings: dict[str, Any], name: str) -> dict[str, Any]:
    section = settings.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"Settings section '{name}' must be a mapping")
    return section


def _string(section: dict[str, Any], name: str, key: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Setting '{name}.{key}' must be a string")
    return value


def apply_settings(
    config: BuildConfiguration, settings: dict[str, Any]
) -> BuildConfiguration:
    """
    Fill unset fields of 'config' from merged settings.

    Fields that already have a value (set from the command line) are left
    alone. Modifies and returns 'config'.

    Raises:
        ConfigError: If a recognized setting has the wrong type.
    """
    package = _section(settings, "package")
    for key in _PACKAGE_FIELDS:
        value = _string(package, "package", key)
        if value and not getattr(config, key):
            setattr(config, key, value)

    toolchain = _section(settings, "toolchain")
    wix_root = _string(toolchain, "toolchain", "wix_root")
    if wix_root and config.toolchain_root is None:
        config.toolchain_root = Path(wix_root)
    signtool_root = _string(toolchain, "toolchain", "signtool_root")
    if signtool_root and config.signtool_root is None:
        config.signtool_root = Path(signtool_root)

    timestamp = _string(_section(settings, "sign"), "sign", "timestamp")
    if timestamp and config.timestamp is None:
        config.timestamp = timestamp

    platform = _string(_section(settings, "build"), "build", "platform")
    if platform and config.platform is None:
        config.platform = platform

    return config
