import socket
import threading
from contextlib import closing
from typing import List

import pytest

from tcp_echo.errors import EchoIOError
from tcp_echo.server import EchoServer, ServerConfig


class RecordingSink:
    """Collects log messages and lets another thread wait for one."""

    def __init__(self):
        self.messages: List[str] = []
        self._condition = threading.Condition()

    def __call__(self, message: str) -> None:
        with self._condition:
            self.messages.append(message)
            self._condition.notify_all()

    def wait_for(self, prefix: str, timeout: float = 5.0) -> None:
        with self._condition:
            found = self._condition.wait_for(
                lambda: any(m.startswith(prefix) for m in self.messages), timeout
            )
        assert found, f"{prefix!r} was never logged: {self.messages}"


class ServerThread(threading.Thread):
    def __init__(self, server: EchoServer):
        super().__init__(daemon=True)
        self.server = server
        self.result = None
        self.error = None

    def run(self):
        try:
            self.result = self.server.run()
        except EchoIOError as e:
            self.error = e


def free_port() -> int:
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def start_server(sink):
    """Start a server in the background and wait until it is accepting."""
    threads = []

    def _start(port: int = 0) -> ServerThread:
        thread = ServerThread(EchoServer(ServerConfig(port=port), sink))
        thread.start()
        threads.append(thread)
        sink.wait_for("Waiting for a client connection")
        return thread

    yield _start

    for thread in threads:
        thread.join(timeout=5)
