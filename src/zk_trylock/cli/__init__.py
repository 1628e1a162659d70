"""CLI module - Command-line interface components."""

from zk_trylock.cli.main import main, run
from zk_trylock.cli.parser import build_parser, parse_arguments

__all__ = [
    "build_parser",
    "main",
    "parse_arguments",
    "run",
]
