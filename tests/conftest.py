"""Ensure project root is on sys.path for test imports."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from microflag import BoolDest, CharDest, DoubleDest, Flag, IntDest, StrDest  # noqa: E402


@dataclass
class Args:
    show_help: bool = False
    out_name: str = "out"
    a_char: str = "A"
    a_number: int = 0
    a_double: float = 123.123


@pytest.fixture
def args() -> Args:
    return Args()


@pytest.fixture
def flags(args: Args) -> list[Flag]:
    """The flag table of the example program, bound to ``args``."""
    return [
        Flag(BoolDest(args, "show_help"), "-h", "--help", "show help message"),
        Flag(StrDest(args, "out_name"), "-o", "--output", "set output file"),
        Flag(CharDest(args, "a_char"), "-c", "--char", "give me a char!"),
        Flag(IntDest(args, "a_number"), "-n", "--number", "print this number"),
        Flag(DoubleDest(args, "a_double"), "-d", "--double", "print a double"),
    ]
