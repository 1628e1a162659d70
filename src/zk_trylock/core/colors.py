"""Console colors for zk-trylock diagnostics.

Only diagnostics written to stderr are colored; outcome lines on stdout
stay plain for scripts.
"""

import os
import sys


class ConsoleColors:
    """ANSI color codes for stderr, disabled when stderr is not a TTY."""
    RED = '\033[91m'
    YELLOW = '\033[93m'
    RESET = '\033[0m'

    # Disable colors if not a TTY or on Windows without ANSI support
    _enabled = sys.stderr.isatty() and (os.name != 'nt' or bool(os.environ.get('TERM')))

    @classmethod
    def error(cls, text: str) -> str:
        """Format text as error (red)"""
        if cls._enabled:
            return f"{cls.RED}{text}{cls.RESET}"
        return text

    @classmethod
    def warning(cls, text: str) -> str:
        if cls._enabled:
            return f"{cls.YELLOW}{text}{cls.RESET}"
        return text
