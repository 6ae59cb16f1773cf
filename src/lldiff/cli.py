"""Command-line interface for link-like-diff.

Usage:
    lldiff run
    lldiff run --only notify
    lldiff run --repo-root /srv/masterdata --log-dir logs
    lldiff version
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from lldiff import __version__
from lldiff.config import settings
from lldiff.errors import LinkLikeDiffError
from lldiff.pipeline.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

STAGES = ("update", "git", "images", "notify")


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser with all commands and arguments.
    """
    parser = argparse.ArgumentParser(
        prog="lldiff",
        description="link-like-diff — master-data diff images delivered over OneBot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lldiff run
  lldiff run --only images
  lldiff run --only notify --log-dir logs

Settings are read from the environment and .env (see lldiff.config).
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run the pipeline (all stages by default)",
        description="update → git → images → notify",
    )
    run_parser.add_argument(
        "--only",
        type=str,
        choices=STAGES,
        default=None,
        help="Run a single stage",
    )
    run_parser.add_argument(
        "--repo-root",
        type=Path,
        default=None,
        help="Tracked repository root (default: REPO_ROOT or .)",
    )
    run_parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write a dated log file into this directory",
    )

    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def setup_logging(level: str, log_dir: Path | None = None) -> None:
    """Configure console logging, plus a daily log file when requested."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"run_{date.today().isoformat()}.log"
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers, force=True)


def cmd_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for full or partial success, 1 for fatal errors)
    """
    config = settings
    if args.repo_root is not None:
        config = settings.model_copy(update={"repo_root": args.repo_root})

    try:
        orchestrator = Orchestrator(config=config)
        if args.only == "update":
            orchestrator.run_update()
        elif args.only == "git":
            orchestrator.run_git()
        elif args.only == "images":
            orchestrator.run_images()
        elif args.only == "notify":
            orchestrator.run_notify()
        else:
            orchestrator.run()

        logger.info("All done.")
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except LinkLikeDiffError as e:
        logger.error("Run failed: %s", e)
        return 1
    except Exception as e:
        logger.error("Run failed: %s", e, exc_info=True)
        return 1


def cmd_version(args: argparse.Namespace) -> int:
    """Execute the version command."""
    print(f"link-like-diff v{__version__}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(settings.log_level, getattr(args, "log_dir", None))

    if args.command == "run":
        return cmd_run(args)
    elif args.command == "version":
        return cmd_version(args)
    else:
        parser.print_help()
        return 0


def cli_entry() -> None:
    """Console script entry point for setuptools."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
