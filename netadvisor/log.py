"""
Logging for netadvisor.

All module loggers hang off the ``netadvisor`` logger, which owns the
handlers: Rich on the console, plus JSON lines in ``<command>.log`` for
long-running commands.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from rich.logging import RichHandler

ROOT_LOGGER = "netadvisor"
FILE_LOGGED_COMMANDS = ("serve",)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, with the traceback when there is one.
    """
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts":      self.formatTime(record, self.datefmt),
            "level":   record.levelname,
            "logger":  record.name,
            "msg":     record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def command_from_argv(argv: Sequence[str]) -> str | None:
    """First positional argument after the program name, skipping options."""
    for arg in argv[1:]:
        if not arg.startswith("-"):
            return arg
    return None


def _configure_root(level: int | str) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root
    root.setLevel(level)

    console = RichHandler(rich_tracebacks=True, show_path=False)
    root.addHandler(console)

    command = command_from_argv(sys.argv)
    if command in FILE_LOGGED_COMMANDS:
        file_handler = logging.FileHandler(Path.cwd() / f"{command}.log", mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)
    return root


def get_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Return the logger for a netadvisor module.

    Parameters
    ----------
    name
        Module name (typically __name__); must live under ``netadvisor``.
    level
        Level applied the first time the package handlers are set up.
    """
    _configure_root(level)
    return logging.getLogger(name)


def set_level(level: int | str) -> None:
    """Change the level of the whole package at runtime (``-v`` on the CLI)."""
    logging.getLogger(ROOT_LOGGER).setLevel(level)
