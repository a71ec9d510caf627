"""
Entry point for dockdash.

This module wires the pieces together and owns the process lifecycle:
  - load configuration (config.py)
  - set up file logging (the terminal belongs to curses)
  - connect to Docker (backend.py)
  - hand the curses screen to the asyncio control loop (app.py)

Key Functions:
  - setup_logging(): rotating log file at the XDG data path
  - main(): runs inside curses.wrapper, initializes colors and the loop
  - run(): console script entry point
"""

import asyncio
import curses
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from . import __version__, get_log_path
from .app import App
from .backend import DockerBackend
from .config import AppConfig, ConfigManager
from .terminal import CursesTerminal
from .ui import init_colors

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(config: AppConfig) -> str:
    """Configure the root logger to write to a rotating file; returns its path."""
    path = config.logging.file_path or get_log_path()
    handler = RotatingFileHandler(
        path,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, config.logging.level.upper(), logging.INFO))
    return path


def main(stdscr, config: AppConfig, backend: Optional[DockerBackend] = None):
    logger.info(f"dockdash {__version__} started")
    curses.curs_set(0)
    init_colors()

    if backend is None:
        backend = DockerBackend(base_url=config.docker.base_url, timeout=config.docker.timeout)
    if not backend.connected:
        logger.warning("Docker is not reachable, lists will stay empty until it is")

    app = App(backend, config)
    try:
        asyncio.run(app.run(CursesTerminal(stdscr)))
    finally:
        backend.close()
        logger.info("dockdash stopped")


def run():
    config = ConfigManager().get_config()
    setup_logging(config)
    # Short delay so a lone Esc is not mistaken for the start of a sequence
    os.environ.setdefault("ESCDELAY", "25")
    try:
        curses.wrapper(main, config)
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt caught, exiting...")


if __name__ == "__main__":
    run()
