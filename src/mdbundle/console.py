"""Coloured diagnostics written to stderr."""

from __future__ import annotations

import sys
from typing import Optional

from colorama import Fore, Style, init as colorama_init

colorama_init()

PREFIX = "[mdbundle]"


def _emit(msg: str, colour: Optional[str] = None) -> None:
    if colour:
        msg = colour + msg + Style.RESET_ALL
    print(msg, file=sys.stderr)


def info(msg: str) -> None:
    _emit(f"{PREFIX} {msg}")


def warn(msg: str) -> None:
    _emit(f"{PREFIX} warning: {msg}", Fore.YELLOW)


def success(msg: str) -> None:
    _emit(f"{PREFIX} {msg}", Fore.GREEN)


def error(msg: str) -> None:
    _emit(f"Error: {msg}", Fore.RED)
