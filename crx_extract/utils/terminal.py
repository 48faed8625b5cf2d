"""Terminal formatting for crx-extract output."""

import os
import re
from pathlib import Path

from colorama import Fore, Style, init

init(autoreset=True)


class TerminalColors:
    """Semantic color scheme for command line output.

    Colors are skipped entirely when ``NO_COLOR`` is set in the environment.
    """

    ERROR = Fore.RED
    WARNING = Fore.YELLOW
    SUCCESS = Fore.GREEN
    INFO = Fore.CYAN
    PATH = Fore.MAGENTA
    RESET = Style.RESET_ALL
    BOLD = Style.BRIGHT

    NO_COLOR = os.environ.get("NO_COLOR") is not None

    ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    @classmethod
    def strip_ansi(cls, text: str) -> str:
        """Remove all ANSI escape sequences from text."""
        return cls.ANSI_ESCAPE_PATTERN.sub("", text)

    @classmethod
    def _paint(cls, color: str, text: str) -> str:
        if cls.NO_COLOR:
            return text
        return f"{color}{text}{cls.RESET}"

    @classmethod
    def error(cls, text: str) -> str:
        return cls._paint(cls.ERROR, text)

    @classmethod
    def warning(cls, text: str) -> str:
        return cls._paint(cls.WARNING, text)

    @classmethod
    def success(cls, text: str) -> str:
        return cls._paint(cls.SUCCESS, text)

    @classmethod
    def info(cls, text: str) -> str:
        return cls._paint(cls.INFO, text)

    @classmethod
    def bold(cls, text: str) -> str:
        return cls._paint(cls.BOLD, text)

    @classmethod
    def path(cls, path: Path | str) -> str:
        """Format a filesystem location."""
        return cls._paint(cls.PATH, str(path))

    @classmethod
    def failure(cls, code: str, message: str) -> str:
        """Format a failure as ``<CODE>: <message>`` in red."""
        return cls.error(f"{code}: {message}")
