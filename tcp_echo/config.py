# config.py

import os

SERVER_HOST = os.getenv("ECHO_SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("ECHO_SERVER_PORT", "0"))
CLIENT_HOST = os.getenv("ECHO_CLIENT_HOST", "127.0.0.1")
LOG_LEVEL = os.getenv("ECHO_LOG_LEVEL", "INFO")

# Pending connections queued by the OS before new ones are rejected
BACKLOG = 4
MAX_BUFFER_SIZE = 80
MAX_LOG_MESSAGE_LENGTH = 256
