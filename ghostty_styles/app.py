"""Application bootstrap: settings, logging and command dispatch."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys

from ghostty_styles.cli import CliContext, build_parser, dispatch
from ghostty_styles.config.settings import AppSettings

LOG_FILE_NAME = "ghostty-styles.log"


def _configure_logger(
    settings: AppSettings,
    *,
    foreground: bool = False,
    verbose: bool = False,
) -> logging.Logger:
    logger = logging.getLogger("ghostty_styles")
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = RotatingFileHandler(
        settings.log_dir / LOG_FILE_NAME,
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)

    if foreground:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter("[daemon] %(message)s"))
        logger.addHandler(console)

    logger.propagate = False
    return logger


def run_app(argv: list[str] | None = None) -> int:
    """Parse the command line and run the selected command."""
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    foreground = args.command == "cycle" and args.action == "start"
    logger = _configure_logger(settings, foreground=foreground, verbose=args.verbose)
    logger.debug("command=%s settings=%s", args.command, settings.app_data_dir)
    return dispatch(args, CliContext(settings))
