# client.py

from contextlib import closing
from dataclasses import dataclass
from typing import Optional

from tcp_echo.config import CLIENT_HOST, MAX_BUFFER_SIZE
from tcp_echo.sink import LogSink, LoguruSink
from tcp_echo.tcp import (
    buffer_text,
    connect_to_address,
    new_tcp_socket,
    receive_from_socket,
    send_to_socket,
)


@dataclass
class ClientConfig:
    """Configuration for a one-shot echo client."""
    port: int
    message: str
    host: str = CLIENT_HOST
    buffer_size: int = MAX_BUFFER_SIZE

    def __post_init__(self):
        if not self.host:
            raise ValueError("Host cannot be empty")
        if not (1 <= self.port <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        if not self.message:
            raise ValueError("Message cannot be empty")
        if self.buffer_size < 2:
            raise ValueError("Buffer size must be at least 2 bytes")


class EchoClient:
    """Sends one message to an echo server and reads one reply back."""

    def __init__(self, config: ClientConfig, log: Optional[LogSink] = None):
        self.config = config
        self.log = log or LoguruSink()
        self.client_socket = None

    def run(self) -> str:
        """Return the reply text, empty if the server disconnected first."""
        self.client_socket = new_tcp_socket(self.log)

        with closing(self.client_socket) as client_socket:
            connect_to_address(self.log, client_socket, self.config.host, self.config.port)

            data = self.config.message.encode()
            send_to_socket(self.log, client_socket, data, len(data))

            buffer = bytearray(self.config.buffer_size)
            recv_size = receive_from_socket(
                self.log, client_socket, buffer, disconnect_message="Server disconnected."
            )
            return buffer_text(buffer[:recv_size])


def start_tcp_client(
    host: str, port: int, message: str, log: Optional[LogSink] = None
) -> str:
    return EchoClient(ClientConfig(port=port, message=message, host=host), log).run()
