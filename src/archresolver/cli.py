"""
Command-line interface for archresolver.

This module provides the `archres` CLI tool for checking which sources of an
Arduino library apply to a target architecture.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from archresolver import __version__
from archresolver.cli_utils import ErrorFormatter, PathValidator, setup_logging
from archresolver.config import (
    PlatformConfig,
    PlatformConfigError,
    PlatformIOConfigError,
)
from archresolver.resolver import (
    ArchitectureResolver,
    LibrarySourceScanner,
    ResolutionResult,
    ResolutionStatus,
)


@dataclass
class ResolveArgs:
    """Arguments shared by the resolve and check commands."""

    library_dir: Path
    sources: List[str] = field(default_factory=list)
    arch: Optional[str] = None
    project_dir: Optional[Path] = None
    environment: Optional[str] = None
    properties: Optional[Path] = None
    verbose: bool = False


def _run_resolver(args: ResolveArgs) -> ResolutionResult:
    project_dir = args.project_dir
    if project_dir is None and args.environment:
        project_dir = Path.cwd()

    platform = PlatformConfig.from_sources(
        architecture=args.arch,
        project_dir=project_dir,
        env_name=args.environment,
    )

    if args.sources:
        sources: list = list(args.sources)
    else:
        sources = [str(p) for p in LibrarySourceScanner(args.library_dir).scan()]

    if args.verbose:
        print(f"Library: {args.library_dir}")
        print(f"Architecture: {platform.architecture}")
        print(f"Sources: {len(sources)}")
        print()

    resolver = ArchitectureResolver(platform)
    return resolver.resolve(args.library_dir, sources, properties_file=args.properties)


def _exit_on_failure(result: ResolutionResult) -> None:
    if result.status is ResolutionStatus.UNSUPPORTED_ARCHITECTURE:
        ErrorFormatter.print_error("Unsupported architecture", result.message)
        sys.exit(1)
    if result.status is ResolutionStatus.MALFORMED_METADATA:
        ErrorFormatter.print_error("Invalid library.properties", result.message)
        sys.exit(1)


def resolve_command(args: ResolveArgs) -> None:
    """Print the library sources that apply to the platform's architecture.

    Examples:
        archres resolve libs/Servo --arch avr
        archres resolve libs/Servo src/avr/Servo.cpp src/sam/Servo.cpp --arch avr
        archres resolve libs/Servo --project-dir . -e uno
    """
    try:
        result = _run_resolver(args)
        _exit_on_failure(result)

        for source in result.sources:
            print(source)

        if args.verbose:
            ErrorFormatter.print_success(result.message)
        sys.exit(0)

    except (PlatformConfigError, PlatformIOConfigError) as e:
        ErrorFormatter.handle_configuration_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def check_command(args: ResolveArgs) -> None:
    """Check whether a library supports the platform's architecture.

    Examples:
        archres check libs/Servo --arch esp32
    """
    try:
        result = _run_resolver(args)
        _exit_on_failure(result)

        ErrorFormatter.print_success(
            f"{result.library_name} supports {result.architecture}"
        )
        sys.exit(0)

    except (PlatformConfigError, PlatformIOConfigError) as e:
        ErrorFormatter.handle_configuration_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "library_dir",
        type=Path,
        help="Library root directory",
    )
    parser.add_argument(
        "-a",
        "--arch",
        default=None,
        help="Platform architecture (default: $ARCHRES_PLATFORM_ARCHITECTURE or platformio.ini)",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=None,
        help="Project directory containing platformio.ini",
    )
    parser.add_argument(
        "-e",
        "--environment",
        default=None,
        help="platformio.ini environment (default: auto-detect)",
    )
    parser.add_argument(
        "--properties",
        type=Path,
        default=None,
        help="Explicit library.properties file (default: <library_dir>/library.properties)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )


def main() -> None:
    """archres - Arduino library architecture resolver."""
    parser = argparse.ArgumentParser(
        prog="archres",
        description="Resolve which Arduino library sources apply to a target architecture",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"archres {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print library sources that apply to the platform's architecture",
    )
    _add_common_arguments(resolve_parser)
    resolve_parser.add_argument(
        "sources",
        nargs="*",
        help="Source files to filter (default: scan the library)",
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check whether a library supports the platform's architecture",
    )
    _add_common_arguments(check_parser)

    parsed_args = parser.parse_args()

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    PathValidator.validate_directory(parsed_args.library_dir)
    if parsed_args.project_dir is not None:
        PathValidator.validate_directory(parsed_args.project_dir)
    if parsed_args.properties is not None:
        PathValidator.validate_file(parsed_args.properties)

    setup_logging(parsed_args.verbose)

    resolve_args = ResolveArgs(
        library_dir=parsed_args.library_dir,
        sources=getattr(parsed_args, "sources", []),
        arch=parsed_args.arch,
        project_dir=parsed_args.project_dir,
        environment=parsed_args.environment,
        properties=parsed_args.properties,
        verbose=parsed_args.verbose,
    )

    if parsed_args.command == "resolve":
        resolve_command(resolve_args)
    elif parsed_args.command == "check":
        check_command(resolve_args)


if __name__ == "__main__":
    main()
