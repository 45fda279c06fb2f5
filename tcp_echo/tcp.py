# tcp.py

import ipaddress
import socket
from typing import Tuple, Union

from tcp_echo.errors import EchoIOError
from tcp_echo.sink import LogSink

Address = Tuple[str, int]
Buffer = Union[bytes, bytearray, memoryview]


def buffer_text(data: Buffer) -> str:
    return bytes(data).decode(errors="replace")


def new_tcp_socket(log: LogSink) -> socket.socket:
    """Construct a new IPv4 TCP socket."""
    log("Constructing a new TCP socket...")
    try:
        return socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e


def bind_socket_to_port(
    log: LogSink, sock: socket.socket, port: int, host: str = "0.0.0.0"
) -> None:
    """Bind the socket to a port number, zero meaning any free port."""
    log(f"Binding to port {port}.")
    try:
        sock.bind((host, port))
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e


def get_socket_port(log: LogSink, sock: socket.socket) -> int:
    """Return the port the socket is currently bound to."""
    try:
        _, port = sock.getsockname()[:2]
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e

    log(f"Binded to random port {port}.")
    return port


def listen_on_socket(log: LogSink, sock: socket.socket, backlog: int) -> None:
    """
    Listen for pending connections. Once the backlog is full the OS
    rejects new connection attempts.
    """
    log(f"Listening on socket with a backlog of {backlog} pending connections.")
    try:
        sock.listen(backlog)
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e


def log_address(log: LogSink, message: str, address: Address) -> None:
    """Log the IP address and port number of the given address."""
    host, port = address[:2]
    try:
        ip = ipaddress.ip_address(host)
    except ValueError as e:
        raise EchoIOError(str(e)) from e

    log(f"{message} {ip}:{port}.")


def accept_on_socket(log: LogSink, sock: socket.socket) -> socket.socket:
    """Block until one client connects and return the accepted socket."""
    log("Waiting for a client connection...")
    try:
        client_socket, address = sock.accept()
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e

    try:
        log_address(log, "Client connection from", address)
    except EchoIOError:
        client_socket.close()
        raise

    return client_socket


def connect_to_address(log: LogSink, sock: socket.socket, host: str, port: int) -> None:
    """Resolve the host name and connect the socket to it."""
    log(f"Connecting to {host}:{port}...")
    try:
        ip = socket.gethostbyname(host)
        sock.connect((ip, port))
    except UnicodeError as e:
        raise EchoIOError(str(e)) from e
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e


def receive_from_socket(
    log: LogSink,
    sock: socket.socket,
    buffer: bytearray,
    disconnect_message: str = "Client disconnected.",
) -> int:
    """
    Block and receive into the buffer, leaving room for the terminating
    zero byte. Returns the received size, zero when the peer disconnected.
    """
    log("Receiving from the socket...")
    try:
        recv_size = sock.recv_into(memoryview(buffer)[: len(buffer) - 1])
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e

    buffer[recv_size] = 0

    if recv_size > 0:
        log(f"Received {recv_size} bytes: {buffer_text(buffer[:recv_size])}")
    else:
        log(disconnect_message)

    return recv_size


def send_to_socket(log: LogSink, sock: socket.socket, data: Buffer, size: int) -> int:
    """Send the first size bytes of data with a single send call."""
    log("Sending to the socket...")
    payload = memoryview(data)[:size]
    try:
        sent_size = sock.send(payload)
    except OSError as e:
        raise EchoIOError.from_os_error(e) from e

    if sent_size > 0:
        log(f"Sent {sent_size} bytes: {buffer_text(payload)}")
    else:
        log("Client disconnected.")

    return sent_size
