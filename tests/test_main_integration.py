import logging
import os

import pytest
from unittest.mock import AsyncMock, MagicMock

import dockdash.main as app_main
from dockdash.config import AppConfig
from dockdash.event import Key


@pytest.fixture
def fake_curses(mocker):
    mocker.patch('curses.curs_set')
    mocker.patch('curses.start_color')
    mocker.patch('curses.use_default_colors')
    mocker.patch('curses.init_pair')
    mocker.patch('curses.color_pair', return_value=0)
    mocker.patch('curses.doupdate')


class ScriptedTerminal:
    """Key source backed by a pipe, pre-loaded with key presses."""

    def __init__(self, keys):
        self.read_fd, self.write_fd = os.pipe()
        os.write(self.write_fd, keys.encode())
        self.frames = 0

    def fileno(self):
        return self.read_fd

    def read_keys(self):
        return [Key(chr(b)) for b in os.read(self.read_fd, 1024)]

    def draw(self, render):
        self.frames += 1
        render(MagicMock(), 100, 30)

    def close(self):
        os.close(self.read_fd)
        os.close(self.write_fd)


def test_main_runs_app_and_closes_backend(mocker, fake_curses):
    mock_app = MagicMock()
    mock_app.run = AsyncMock()
    app_cls = mocker.patch('dockdash.main.App', return_value=mock_app)
    mocker.patch('dockdash.main.CursesTerminal')
    backend = MagicMock()

    app_main.main(MagicMock(), AppConfig(), backend=backend)

    app_cls.assert_called_once()
    mock_app.run.assert_awaited_once()
    backend.close.assert_called_once()


def test_main_closes_backend_when_loop_crashes(mocker, fake_curses):
    mock_app = MagicMock()
    mock_app.run = AsyncMock(side_effect=RuntimeError("boom"))
    mocker.patch('dockdash.main.App', return_value=mock_app)
    mocker.patch('dockdash.main.CursesTerminal')
    backend = MagicMock()

    with pytest.raises(RuntimeError):
        app_main.main(MagicMock(), AppConfig(), backend=backend)

    backend.close.assert_called_once()


def test_main_loop_until_quit(mocker, fake_curses):
    terminal = ScriptedTerminal("jq")
    mocker.patch('dockdash.main.CursesTerminal', return_value=terminal)
    backend = MagicMock()
    backend.list_resources.return_value = [
        {"Id": "1", "Names": ["/web"], "Image": "nginx", "State": "running"},
        {"Id": "2", "Names": ["/db"], "Image": "postgres", "State": "exited"},
    ]
    config = AppConfig()
    config.ui.tick_rate_ms = 60_000

    try:
        app_main.main(MagicMock(), config, backend=backend)
    finally:
        terminal.close()

    assert terminal.frames >= 2
    backend.list_resources.assert_called()
    backend.close.assert_called_once()


def test_setup_logging_writes_to_configured_file(tmp_path):
    config = AppConfig()
    config.logging.file_path = str(tmp_path / "dockdash.log")
    config.logging.level = "debug"
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level

    try:
        path = app_main.setup_logging(config)
        logging.getLogger("dockdash.test").debug("hello from the test")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

    assert path == config.logging.file_path
    assert "DEBUG - hello from the test" in (tmp_path / "dockdash.log").read_text()


def test_log_path_follows_xdg(monkeypatch, tmp_path):
    from dockdash import get_log_path

    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert get_log_path() == str(tmp_path / "dockdash" / "logs" / "dockdash.log")
