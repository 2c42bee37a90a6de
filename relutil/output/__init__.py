"""Console output and error presentation."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .errors import print_release_error, release_error_exit_code

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
    "print_release_error",
    "release_error_exit_code",
]
