# errors.py

import os
from typing import Optional


class EchoIOError(Exception):
    """The single error kind raised by socket operations."""

    category = "I/O error"

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.errno = errno

    @classmethod
    def from_os_error(cls, error: OSError) -> "EchoIOError":
        """Translate an OSError into an EchoIOError with the platform error text."""
        message = error.strerror
        if not message and error.errno is not None:
            message = os.strerror(error.errno)
        if not message:
            message = str(error) or type(error).__name__
        return cls(message, errno=error.errno)

    def __str__(self) -> str:
        return self.message
