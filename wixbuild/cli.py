# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for wixbuild.

This module provides the ``wixbuild`` entry point. One invocation does one
of three things:

    --init: Create wix/main.wxs from the embedded template
    --print-template: Print the rendered template to stdout
    (default): Build the installer

Example:
    Create the WiX Source once, then edit its GUIDs:
        ```bash
        $ wixbuild --init
        ```

    Build an installer from wix/main.wxs:
        ```bash
        $ wixbuild
        ```

    Build and sign with a timestamp server:
        ```bash
        $ wixbuild --sign --timestamp http://timestamp.digicert.com
        ```

    Show the toolchain output:
        ```bash
        $ wixbuild --nocapture -v
        ```

Exit Codes:

- 0: Success
- 2: Usage error
- Otherwise the ``code`` of the raised WixBuildError (see
  wixbuild.exceptions)

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Errors are printed to stderr as ``Error[<code>] (<kind>): <message>``,
    in red when stderr is a terminal. With -vv or more the traceback is
    printed as well.
"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
from typing import Sequence, TextIO

from wixbuild.build import BuildPipeline, init, print_template
from wixbuild.config import BuildConfiguration, apply_settings, load_settings
from wixbuild.exceptions import WixBuildError
from wixbuild.logging import Logger, get_logger
from wixbuild.manifest import find_project_root, read_manifest, resolve

ERROR_COLOR = "\033[91m"  # Bright red
RESET_COLOR = "\033[0m"


def _version() -> str:
    try:
        return version("wixbuild")
    except PackageNotFoundError:
        from wixbuild import __version__

        return __version__


def format_error(err: WixBuildError, stream: TextIO) -> str:
    """Format an error line, colored only when 'stream' is a terminal."""
    tag = f"Error[{err.code}] ({err.kind})"
    isatty = getattr(stream, "isatty", None)
    if isatty is not None and isatty():
        tag = f"{ERROR_COLOR}{tag}{RESET_COLOR}"
    return f"{tag}: {err}"


def configuration_from_args(args: argparse.Namespace) -> BuildConfiguration:
    """Build a BuildConfiguration from parsed arguments."""
    return BuildConfiguration(
        binary_name=args.binary_name,
        description=args.description,
        manufacturer=args.manufacturer,
        product_name=args.product_name,
        input=Path(args.input) if args.input else None,
        sign=args.sign,
        timestamp=args.timestamp,
        capture_output=not args.no_capture,
        verbosity=args.verbose,
        project_root=Path(args.project_dir) if args.project_dir else None,
    )


def _prepare(config: BuildConfiguration, logger: Logger) -> BuildConfiguration:
    """Locate the project and apply settings files to 'config'."""
    start = config.project_root or Path.cwd()
    config.project_root = find_project_root(start)
    logger.verbose("CONFIG", f"Project root: {config.project_root}")
    apply_settings(config, load_settings(config.project_root, logger=logger))
    return config


def cmd_init(config: BuildConfiguration, force: bool, logger: Logger) -> int:
    """Handler for 'wixbuild --init'."""
    context = resolve(read_manifest(config.project_root), config)
    path = init(config.project_root, context, force=force, logger=logger)
    print(f"Created {path}")
    print("Replace each 'replace-with-a-guid' placeholder with a unique GUID.")
    return 0


def cmd_print_template(config: BuildConfiguration) -> int:
    """Handler for 'wixbuild --print-template'."""
    context = resolve(read_manifest(config.project_root), config)
    print_template(context, sys.stdout)
    return 0


def cmd_build(config: BuildConfiguration, logger: Logger) -> int:
    """Handler for the default build action.

    Prints a result summary to stdout once the installer is built.
    """
    result = BuildPipeline(config, logger=logger).run()

    print("=" * 70)
    print("BUILD RESULTS")
    print("=" * 70)
    print(f"Product:         {result.product_name}")
    print(f"Version:         {result.version}")
    print(f"Platform:        {result.platform}")
    print(f"Package:         {result.package_path}")
    print(f"Signed:          {'yes' if result.signed else 'no'}")
    for stage in result.stages:
        print(f"  {stage.tool:<14} {stage.elapsed:.2f}s")
    print("=" * 70)
    print()
    print("[SUCCESS] Installer built successfully!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wixbuild",
        description=(
            "Build a Windows installer (msi) for a Cargo project with the "
            "WiX Toolset."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"wixbuild {_version()}",
    )
    parser.add_argument(
        "-b",
        "--binary-name",
        help="Overrides the name of the first [[bin]] target (or the package "
        "name) as the executable within the installer",
    )
    parser.add_argument(
        "-d",
        "--description",
        help="Overrides the 'description' field of Cargo.toml",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing wix/main.wxs (only with --init)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--init",
        action="store_true",
        help="Create wix/main.wxs from the embedded template",
    )
    mode.add_argument(
        "--print-template",
        action="store_true",
        help="Print the rendered WiX Source template to stdout",
    )
    parser.add_argument(
        "-m",
        "--manufacturer",
        help="Overrides the first author in Cargo.toml as the manufacturer",
    )
    parser.add_argument(
        "--nocapture",
        "--no-capture",
        dest="no_capture",
        action="store_true",
        help="Show output from the compiler, linker and signer",
    )
    parser.add_argument(
        "-p",
        "--product-name",
        help="Overrides the 'name' field of Cargo.toml as the product name",
    )
    parser.add_argument(
        "-s",
        "--sign",
        action="store_true",
        help="Sign the installer with signtool, picking a certificate "
        "automatically (/a)",
    )
    parser.add_argument(
        "-t",
        "--timestamp",
        help="Timestamp server URL for signing (only with --sign)",
    )
    parser.add_argument(
        "-C",
        "--project-dir",
        help="Directory to start searching for Cargo.toml (default: current "
        "directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase output detail; repeat for debug output",
    )
    parser.add_argument(
        "input",
        nargs="?",
        metavar="INPUT",
        help="WiX Source (wxs) file (default: wix/main.wxs)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the wixbuild CLI.

    This function is registered as the 'wixbuild' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.force and not args.init:
        parser.error("--force can only be used with --init")
    if args.timestamp and not args.sign:
        parser.error("--timestamp can only be used with --sign")
    if args.input and (args.init or args.print_template):
        parser.error("INPUT cannot be used with --init or --print-template")

    logger = get_logger(verbosity=args.verbose)
    config = configuration_from_args(args)

    try:
        _prepare(config, logger)
        if args.init:
            exit_code = cmd_init(config, args.force, logger)
        elif args.print_template:
            exit_code = cmd_print_template(config)
        else:
            exit_code = cmd_build(config, logger)
    except WixBuildError as err:
        print(format_error(err, sys.stderr), file=sys.stderr)
        if args.verbose >= 2:
            import traceback

            traceback.print_exc()
        exit_code = err.code

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
