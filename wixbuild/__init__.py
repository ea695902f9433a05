"""
wixbuild - Windows installers for Cargo projects

A Python command-line tool that turns a compiled Cargo project into a
Windows Installer (msi) package by driving the WiX Toolset.

wixbuild provides:
  - Installer metadata resolved from Cargo.toml, with overrides
  - A starter WiX Source template (--init / --print-template)
  - Two-phase compile (candle) and link (light) builds
  - Optional signing with signtool and a timestamp server
  - Layered YAML settings for toolchain locations and defaults

Quick Start
-----------
Create wix/main.wxs and fill in its GUIDs:

    $ wixbuild --init

Build the installer (after cargo build --release):

    $ wixbuild

For full CLI documentation:

    $ wixbuild --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
manifest : module
    Cargo.toml reading and metadata resolution.
config : package
    Build options and YAML settings files.
build : package
    Template rendering, source lookup, toolchain execution, pipeline.

Public API
----------
    from wixbuild.build import BuildPipeline, init, print_template
    from wixbuild.config import BuildConfiguration
    from wixbuild.manifest import read_manifest, resolve

Project Information
-------------------
License: Apache-2.0
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Build Windows installers for Cargo projects with the WiX Toolset"

# Re-export commonly used names for convenience
from wixbuild.build import BuildPipeline, BuildState
from wixbuild.config import BuildConfiguration
from wixbuild.manifest import ProjectDescriptor, read_manifest, resolve

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "BuildPipeline",
    "BuildState",
    "BuildConfiguration",
    "ProjectDescriptor",
    "read_manifest",
    "resolve",
]
