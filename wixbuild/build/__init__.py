"""
Installer building for wixbuild.

This package turns a Cargo project into a Windows Installer package with
the WiX Toolset: it finds or renders the WiX Source, compiles it with
candle, links it with light, and optionally signs the result with signtool.

Public API:

BuildPipeline : class
    Build one installer package.
BuildState : enum
    States of the build sequence.
init : function
    Write the starter WiX Source to wix/main.wxs.
print_template : function
    Write the starter WiX Source to a stream.

Example:
    from pathlib import Path
    from wixbuild.build import BuildPipeline
    from wixbuild.config import BuildConfiguration

    result = BuildPipeline(BuildConfiguration(project_root=Path("."))).run()
    print(f"Package: {result.package_path}")
"""

from .pipeline import BuildPipeline, BuildState
from .source import init, print_template

__all__ = ["BuildPipeline", "BuildState", "init", "print_template"]
