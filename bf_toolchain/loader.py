"""Program loading: read a whole source file (or stdin) into a byte buffer."""

import logging
import sys
from pathlib import Path
from typing import BinaryIO, Optional

__all__ = ['LoaderError', 'load_program', 'STDIN_PATHS']

logger = logging.getLogger(__name__)

# Paths that mean "read the program from standard input"
STDIN_PATHS = (None, "", "-")


class LoaderError(Exception):
    """Raised when the program source cannot be read completely."""
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


def load_program(path: Optional[str] = None, stdin: Optional[BinaryIO] = None) -> bytes:
    """Read a program buffer from a file path, or from stdin for None/""/"-"."""
    if path in STDIN_PATHS:
        stream = stdin if stdin is not None else sys.stdin.buffer
        try:
            data = stream.read()
        except OSError as e:
            raise LoaderError(f"Error reading stdin: {e}") from e
        logger.debug(f"Loaded {len(data)} bytes from stdin")
        return bytes(data)

    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        raise LoaderError(f"File not found: {path}", path) from None
    except IsADirectoryError:
        raise LoaderError(f"Not a file: {path}", path) from None
    except OSError as e:
        raise LoaderError(f"Error reading {path}: {e}", path) from e
    logger.debug(f"Loaded {len(data)} bytes from {path}")
    return data
