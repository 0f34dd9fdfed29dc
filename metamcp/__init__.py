"""JSON-RPC 2.0 messages and codec, with MCP constants and handshake configuration."""

__version__ = "0.1.0"
__all__ = ["model", "codec", "protocol"]