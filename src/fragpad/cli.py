"""CLI entry point for fragpad."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping

from fragpad.app import App
from fragpad.errors import IOFailure
from fragpad.session import Session
from fragpad.settings import SettingsManager

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fragpad",
        description="Fragment based terminal editor for Python",
    )
    parser.add_argument("file", nargs="?", help="File to load into a fragment at startup")
    return parser.parse_args(argv)


def configure_logging(environ: Mapping[str, str] | None = None) -> None:
    """Send log records to ``$FRAGPAD_LOG`` or nowhere.

    The editor owns the terminal, so records never go to stdout or stderr.
    """
    environ = os.environ if environ is None else environ
    path = environ.get("FRAGPAD_LOG", "")
    if not path:
        logging.getLogger().addHandler(logging.NullHandler())
        return
    level_name = environ.get("FRAGPAD_LOG_LEVEL", "info").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging()

    settings = SettingsManager.create(os.getcwd())
    session = Session(settings)
    if settings.load_error is not None:
        session.notify(f"Settings ignored: {settings.load_error}")
    if args.file:
        session.load_file(args.file)

    try:
        asyncio.run(App(session).run())
    except IOFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    sys.exit(0)


if __name__ == "__main__":
    main()
