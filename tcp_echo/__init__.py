"""Single-client TCP echo server and client."""
