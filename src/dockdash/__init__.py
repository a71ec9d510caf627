"""
dockdash - A keyboard-driven terminal dashboard for the Docker daemon.

This package lists the daemon's containers, images, volumes and networks,
shows one container in detail, and issues lifecycle commands (restart, stop,
kill, remove) while refreshing in near real time.

Features:
  - Four resource tabs with variable-height rows (ports, tags)
  - Container detail panes (Status, Details, Volumes, Network)
  - One lifecycle operation in flight at a time, retried until it lands
  - Error banners for removals the daemon refuses
  - YAML configuration for keys, refresh cadence and logging

Main Components:
  - main.py: Bootstrap, logging setup, curses wrapper
  - app.py: Screen/operation controller and control loop
  - event.py: Clock + input multiplexer
  - state.py: Selectable list and scrollable viewport state
  - views.py / detail.py: List and detail views
  - backend.py: Docker API wrapper
  - formatting.py: Raw record -> display row projection
  - ui.py / terminal.py: Curses rendering and key input

Usage:
  python -m dockdash

Dependencies:
  - docker>=7.0.0
  - PyYAML, rich
  - Python 3.10+
  - curses (built-in, not available on Windows natively)
"""

import os
from pathlib import Path

__version__ = "0.1.0"


def get_log_path() -> str:
    """
    Get the log file path following XDG Base Directory spec.

    Returns XDG_DATA_HOME/dockdash/logs/dockdash.log with fallback to /tmp.
    Creates directory if it doesn't exist.

    Returns:
        str: Absolute path to log file (/tmp/dockdash.log as fallback)
    """
    xdg_data_home = os.environ.get('XDG_DATA_HOME')
    if not xdg_data_home:
        xdg_data_home = Path.home() / '.local' / 'share'
    else:
        xdg_data_home = Path(xdg_data_home)

    log_dir = xdg_data_home / 'dockdash' / 'logs'

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return str(log_dir / 'dockdash.log')
    except OSError:
        return '/tmp/dockdash.log'
