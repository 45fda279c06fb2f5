import argparse
import sys
from typing import List, Optional

from loguru import logger

from tcp_echo.client import start_tcp_client
from tcp_echo.config import CLIENT_HOST, LOG_LEVEL, SERVER_PORT
from tcp_echo.errors import EchoIOError
from tcp_echo.server import start_tcp_server
from tcp_echo.sink import LogSink, LoguruSink


def configure_logging(level: str = LOG_LEVEL) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def run_server_task(port: int, log: LogSink) -> bool:
    """
    Run one server invocation and report its outcome through the sink.
    Returns True if the session ended without an I/O error.
    """
    log("Starting server.")
    ok = True
    try:
        start_tcp_server(port, log)
    except EchoIOError as e:
        log(str(e))
        ok = False

    log("Server terminated.")
    return ok


def run_client_task(host: str, port: int, message: str, log: LogSink) -> bool:
    log("Starting client.")
    ok = True
    try:
        start_tcp_client(host, port, message, log)
    except EchoIOError as e:
        log(str(e))
        ok = False

    log("Client terminated.")
    return ok


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Single-client TCP echo server and client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    server_parser = subparsers.add_parser("server", help="Echo data back to one client")
    server_parser.add_argument(
        "--port",
        type=int,
        default=SERVER_PORT,
        help=f"TCP port to listen on, 0 for a random port (default: {SERVER_PORT})",
    )

    client_parser = subparsers.add_parser("client", help="Send one message to an echo server")
    client_parser.add_argument(
        "--host", type=str, default=CLIENT_HOST, help=f"Server IP or hostname (default: {CLIENT_HOST})"
    )
    client_parser.add_argument("--port", type=int, required=True, help="Server TCP port")
    client_parser.add_argument("--message", type=str, required=True, help="Message to send")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    configure_logging()
    log = LoguruSink()

    try:
        if args.command == "server":
            ok = run_server_task(args.port, log)
        else:
            ok = run_client_task(args.host, args.port, args.message, log)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return 2
    except KeyboardInterrupt:
        logger.info("Stopped by user.")
        return 0

    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
