"""Command-line interface for elm-dep-cache."""

import argparse
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from . import __version__
from .core.runner import CacheRunner
from .errors import FetchFailedError, ManifestUnreadableError
from .logging_config import CLI_FORMAT, setup_logging
from .models.config import ElmDepCacheConfig
from .models.results import RunOutcome


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="elm-dep-cache",
        description="Cache Elm dependencies in the project directory, keyed by elm.json",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Restore ELM_HOME from cache, or install and cache it
  elm-dep-cache

  # Drop cache entries for older versions of elm.json
  elm-dep-cache --clean

  # Use a custom ELM_HOME
  elm-dep-cache --elm-home ./.elm-home
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--clean",
        action="store_true",
        help="Remove cache entries that do not match the current elm.json",
    )

    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Run diagnostic checks",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML config file (command-line flags take precedence)",
    )

    # Cache settings
    cache_group = parser.add_argument_group("cache settings")
    cache_group.add_argument(
        "--manifest",
        "-m",
        type=Path,
        default=None,
        metavar="FILE",
        help="Manifest hashed into the cache key (default: elm.json)",
    )
    cache_group.add_argument(
        "--cache-dir",
        type=str,
        default=None,
        metavar="NAME",
        help="Cache directory name (default: .elm-dep-cache)",
    )

    # Elm settings
    elm_group = parser.add_argument_group("elm settings")
    elm_group.add_argument(
        "--elm-home",
        type=Path,
        default=None,
        metavar="DIR",
        help="ELM_HOME directory (default: $ELM_HOME or the OS default)",
    )
    elm_group.add_argument(
        "--elm-binary",
        type=str,
        default=None,
        metavar="PATH",
        help="Elm executable (default: elm)",
    )
    elm_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Kill elm make after this many seconds",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would happen without copying, installing or deleting",
    )
    output_group.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="FILE",
        help="Also write log lines to this file",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output",
    )

    return parser


def build_config(args: argparse.Namespace) -> ElmDepCacheConfig:
    """Build config from an optional YAML file plus command-line overrides."""
    data: dict[str, Any] = {}
    if args.config:
        data = ElmDepCacheConfig.from_yaml_file(args.config).model_dump(exclude_unset=True)

    if args.manifest is not None:
        data["manifest"] = args.manifest
    if args.clean:
        data["clean"] = True
    if args.dry_run:
        data["dry_run"] = True
    if args.log_file is not None:
        data["log_file"] = args.log_file

    # Cache settings
    if args.cache_dir is not None:
        data.setdefault("cache", {})["directory"] = args.cache_dir

    # Elm settings
    elm_kwargs: dict = {}
    if args.elm_home is not None:
        elm_kwargs["home"] = args.elm_home
    if args.elm_binary is not None:
        elm_kwargs["binary"] = args.elm_binary
    if args.timeout is not None:
        elm_kwargs["timeout"] = args.timeout
    if elm_kwargs:
        data.setdefault("elm", {}).update(elm_kwargs)

    # Log level
    if args.verbose:
        data["log_level"] = "DEBUG"
    elif args.quiet:
        data["log_level"] = "ERROR"

    return ElmDepCacheConfig.model_validate(data)


def run_cache(config: ElmDepCacheConfig, quiet: bool = False) -> int:
    """Run restore/install or clean mode and map the outcome to an exit code."""
    console = Console()
    setup_logging(
        level=config.log_level,
        log_file=str(config.log_file) if config.log_file else None,
        format_string=CLI_FORMAT,
        force=True,
    )

    if not quiet:
        console.print(f"[bold blue]elm-dep-cache[/bold blue] v{__version__}")

    try:
        runner = CacheRunner(config)

        if config.clean:
            result = runner.clean()
            if not quiet:
                console.print(f"[green]Done![/green] Removed {result.removed}, kept {result.kept}")
            return 0

        outcome = runner.run()

    except ManifestUnreadableError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1
    except FetchFailedError as e:
        console.print(f"[red]Failed to install dependencies:[/red] {e}")
        return 1

    if not quiet:
        if outcome == RunOutcome.INSTALLED_NOT_CACHED:
            console.print("[yellow]Dependencies installed but caching failed[/yellow]")
        else:
            console.print(f"[green]Done![/green] {outcome.value.replace('_', ' ')}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except Exception as e:
        Console().print(f"[red]Configuration error:[/red] {e}")
        return 1

    if args.doctor:
        from .doctor import run_doctor

        return run_doctor(config)

    return run_cache(config, quiet=args.quiet)


if __name__ == "__main__":
    sys.exit(main())
