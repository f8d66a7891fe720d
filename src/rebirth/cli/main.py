"""
Command-line interface for the rebirth reload supervisor.

This module provides the main CLI entry point: it loads the configuration,
builds the supervisor for the current working directory, and either runs it
or relays a reload/stop request to an already running instance.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config import DEFAULT_CONFIG_FILE, load_config
from ..models.runtime import RunPaths, TriggerEvent
from ..orchestration import ReloadSupervisor
from ..validation import RebirthError, handle_cli_error

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rebirth",
        description="Rebuild, run and restart a program on demand, on the host or in a docker container.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="run",
        choices=["run", "reload", "stop"],
        help="'run' supervises the program (default); 'reload' and 'stop' signal a running supervisor.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILE),
        help=f"Configuration file. Defaults to {DEFAULT_CONFIG_FILE} in the working directory.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for the rebirth supervisor.

    Raises:
        SystemExit: On configuration errors, startup failures, or failed relays.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        app_config = load_config(args.config)
    except (FileNotFoundError, RebirthError, ValueError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    supervisor = ReloadSupervisor(app_config, RunPaths.for_root(Path.cwd()))

    if args.command == "run":
        try:
            supervisor.run()
        except RebirthError as e:
            handle_cli_error(
                error=e,
                context="supervisor startup",
                exit_code=1,
                include_traceback=True,
                logger=logger,
            )
        logger.info("Supervisor stopped.")
        return

    event = TriggerEvent.RELOAD if args.command == "reload" else TriggerEvent.SHUTDOWN
    try:
        supervisor.relay(event)
    except RebirthError as e:
        handle_cli_error(
            error=e,
            context=f"{args.command} request",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )
    logger.info(f"{args.command.capitalize()} request sent.")


if __name__ == "__main__":
    main_cli()
