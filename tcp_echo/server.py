# server.py

import socket
from contextlib import closing
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tcp_echo.config import BACKLOG, MAX_BUFFER_SIZE, SERVER_HOST
from tcp_echo.errors import EchoIOError
from tcp_echo.sink import LogSink, LoguruSink
from tcp_echo.tcp import (
    accept_on_socket,
    bind_socket_to_port,
    get_socket_port,
    listen_on_socket,
    new_tcp_socket,
    receive_from_socket,
    send_to_socket,
)


@dataclass
class ServerConfig:
    """Configuration for a single-client echo server."""
    port: int = 0
    host: str = SERVER_HOST
    backlog: int = BACKLOG
    buffer_size: int = MAX_BUFFER_SIZE

    def __post_init__(self):
        if not self.host:
            raise ValueError("Host cannot be empty")
        if not (0 <= self.port <= 65535):
            raise ValueError("Port must be between 0 and 65535")
        if self.backlog < 1:
            raise ValueError("Backlog must be positive")
        if self.buffer_size < 2:
            raise ValueError("Buffer size must be at least 2 bytes")


class EchoState(Enum):
    RECEIVING = "receiving"
    SENDING = "sending"
    DONE = "done"
    FAILED = "failed"


class EchoSession:
    """
    Receives into a fixed buffer and sends each chunk straight back until
    the peer disconnects or a socket call fails.

    A short send is not retried: the unsent tail of a chunk is dropped.
    """

    def __init__(self, log: LogSink, sock: socket.socket, buffer_size: int = MAX_BUFFER_SIZE):
        self.log = log
        self.sock = sock
        self.buffer = bytearray(buffer_size)
        self.state = EchoState.RECEIVING
        self.rounds = 0

    def run(self) -> EchoState:
        recv_size = 0
        while self.state not in (EchoState.DONE, EchoState.FAILED):
            try:
                if self.state is EchoState.RECEIVING:
                    recv_size = receive_from_socket(self.log, self.sock, self.buffer)
                    self.state = EchoState.SENDING if recv_size > 0 else EchoState.DONE
                else:
                    sent_size = send_to_socket(self.log, self.sock, self.buffer, recv_size)
                    if sent_size > 0:
                        self.rounds += 1
                        self.state = EchoState.RECEIVING
                    else:
                        self.state = EchoState.DONE
            except EchoIOError:
                self.state = EchoState.FAILED
                raise

        return self.state


class EchoServer:
    """Binds, accepts exactly one client and echoes its data back."""

    def __init__(self, config: ServerConfig, log: Optional[LogSink] = None):
        self.config = config
        self.log = log or LoguruSink()
        self.port: Optional[int] = None
        self.server_socket: Optional[socket.socket] = None
        self.client_socket: Optional[socket.socket] = None
        self.session: Optional[EchoSession] = None

    def run(self) -> EchoState:
        """
        Run the whole lifecycle. Every socket opened here is closed before
        returning, whichever step raised.
        """
        self.server_socket = new_tcp_socket(self.log)

        with closing(self.server_socket) as server_socket:
            bind_socket_to_port(self.log, server_socket, self.config.port, self.config.host)

            if self.config.port == 0:
                self.port = get_socket_port(self.log, server_socket)
            else:
                self.port = self.config.port

            listen_on_socket(self.log, server_socket, self.config.backlog)

            self.client_socket = accept_on_socket(self.log, server_socket)

            with closing(self.client_socket) as client_socket:
                self.session = EchoSession(self.log, client_socket, self.config.buffer_size)
                return self.session.run()


def start_tcp_server(port: int, log: Optional[LogSink] = None) -> EchoState:
    """Start an echo server on the given port, zero for a random port."""
    return EchoServer(ServerConfig(port=port), log).run()
