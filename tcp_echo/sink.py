# sink.py

from typing import Callable

from loguru import logger

from tcp_echo.config import MAX_LOG_MESSAGE_LENGTH

LogSink = Callable[[str], None]


def truncate_message(message: str, limit: int = MAX_LOG_MESSAGE_LENGTH) -> str:
    """Cut a log message down to the maximum length a sink accepts."""
    # The limit counts a terminating zero byte
    if len(message) < limit:
        return message
    return message[: limit - 1]


class LoguruSink:
    """Default sink: forwards lifecycle messages to the loguru logger."""

    def __init__(self, level: str = "INFO"):
        self.level = level

    def __call__(self, message: str) -> None:
        logger.opt(depth=1).log(self.level, truncate_message(message))


class CallbackSink:
    """Forwards messages to a host callback without letting it fail the caller."""

    def __init__(self, callback: Callable[[str], None]):
        self.callback = callback

    def __call__(self, message: str) -> None:
        try:
            self.callback(truncate_message(message))
        except Exception as e:
            logger.error(f"Failed to deliver log message: {e}")
