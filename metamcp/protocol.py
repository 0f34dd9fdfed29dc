"""Model Context Protocol constants, error codes and handshake configuration."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Callable, Iterable

PROTOCOL_VERSION_LATEST = "2024-11-05"
PROTOCOL_VERSION_MINIMUM = "2024-11-05"

METHOD_INITIALIZE = "initialize"
METHOD_INITIALIZED = "initialized"
METHOD_SHUTDOWN = "shutdown"
METHOD_EXIT = "exit"

METHOD_LIST_RESOURCES = "resources/list"
METHOD_READ_RESOURCE = "resources/read"
METHOD_SUBSCRIBE = "resources/subscribe"
METHOD_UNSUBSCRIBE = "resources/unsubscribe"

METHOD_LIST_TOOLS = "tools/list"
METHOD_CALL_TOOL = "tools/call"

METHOD_LIST_PROMPTS = "prompts/list"
METHOD_GET_PROMPT = "prompts/get"

METHOD_SET_LOG_LEVEL = "logging/setLevel"

METHOD_NOTIFICATION_CANCELLED = "notifications/cancelled"
METHOD_NOTIFICATION_PROGRESS = "notifications/progress"
METHOD_NOTIFICATION_RESOURCES_CHANGED = "notifications/resources/list_changed"
METHOD_NOTIFICATION_TOOLS_CHANGED = "notifications/tools/list_changed"
METHOD_NOTIFICATION_PROMPTS_CHANGED = "notifications/prompts/list_changed"

CAPABILITY_RESOURCES = "resources"
CAPABILITY_TOOLS = "tools"
CAPABILITY_PROMPTS = "prompts"
CAPABILITY_LOGGING = "logging"
CAPABILITY_ROOTS = "roots"
CAPABILITY_SAMPLING = "sampling"
CAPABILITY_EXPERIMENTAL = "experimental"

LOG_LEVEL_DEBUG = "debug"
LOG_LEVEL_INFO = "info"
LOG_LEVEL_WARN = "warn"
LOG_LEVEL_ERROR = "error"

DEFAULT_SUPPORTED_VERSIONS = ("1.0", "0.1.0")


class McpErrorCode(IntEnum):
    """Error codes used by the protocol, extending the JSON-RPC ones."""

    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    RESOURCE_NOT_FOUND = -32001
    RESOURCE_UNAVAILABLE = -32002
    TOOL_NOT_FOUND = -32003
    TOOL_EXECUTION_ERROR = -32004
    PROMPT_NOT_FOUND = -32005
    INVALID_CAPABILITY = -32006
    PROTOCOL_MISMATCH = -32007
    UNAUTHORIZED = -32008
    RATE_LIMITED = -32009
    TIMEOUT = -32010
    SERVER_NOT_INITIALIZED = -32011


_MCP_ERROR_MESSAGES = {
    McpErrorCode.RESOURCE_NOT_FOUND: "Resource not found",
    McpErrorCode.RESOURCE_UNAVAILABLE: "Resource unavailable",
    McpErrorCode.TOOL_NOT_FOUND: "Tool not found",
    McpErrorCode.TOOL_EXECUTION_ERROR: "Tool execution error",
    McpErrorCode.PROMPT_NOT_FOUND: "Prompt not found",
    McpErrorCode.INVALID_CAPABILITY: "Invalid capability",
    McpErrorCode.PROTOCOL_MISMATCH: "Protocol version mismatch",
    McpErrorCode.UNAUTHORIZED: "Unauthorized access",
    McpErrorCode.RATE_LIMITED: "Rate limit exceeded",
    McpErrorCode.TIMEOUT: "Request timeout",
    McpErrorCode.SERVER_NOT_INITIALIZED: "Server not initialized",
}


def mcp_error_message(code: int) -> str | None:
    """The message for a protocol-specific error code, or None if it has none."""
    try:
        return _MCP_ERROR_MESSAGES.get(McpErrorCode(code))
    except ValueError:
        return None


class UnsupportedVersionError(ValueError):
    """Raised when a client asks for a protocol version the server does not speak."""

    def __init__(self, client_version: str, supported_versions: Iterable[str]) -> None:
        self.client_version = client_version
        self.supported_versions = list(supported_versions)
        listed = " ".join(self.supported_versions)
        super().__init__(
            f"unsupported protocol version: {client_version} (supported: [{listed}])"
        )


@dataclass
class HandshakeConfig:
    """Settings for a server that performs the initialization handshake."""

    name: str = "Meta-MCP Server"
    version: str = "1.0.0"
    handshake_timeout: float = 30.0
    supported_versions: list[str] = field(
        default_factory=lambda: list(DEFAULT_SUPPORTED_VERSIONS)
    )

    @classmethod
    def default(cls) -> HandshakeConfig:
        """A configuration with the default name, version, timeout and versions."""
        return cls()


def is_version_supported(client_version: str, supported_versions: Iterable[str]) -> bool:
    """True if the client's version is one of the supported ones."""
    return client_version in supported_versions


def validate_version_compatibility(
    client_version: str, supported_versions: Iterable[str]
) -> None:
    """Raise UnsupportedVersionError unless the client's version is supported."""
    versions = list(supported_versions)
    if not is_version_supported(client_version, versions):
        raise UnsupportedVersionError(client_version, versions)


def with_handshake_timeout(timeout: float) -> Callable[[HandshakeConfig], None]:
    """An option that sets the handshake timeout, in seconds."""

    def apply(config: HandshakeConfig) -> None:
        config.handshake_timeout = timeout

    return apply


def with_supported_versions(*args: str) -> Callable[[HandshakeConfig], None]:
    """An option that replaces the supported protocol versions."""
    versions = list(args)

    def apply(config: HandshakeConfig) -> None:
        config.supported_versions = list(versions)

    return apply


_id_lock = threading.Lock()
_last_id_ns = 0


def generate_connection_id() -> str:
    """A unique, timestamp-based connection identifier with nanosecond precision."""
    global _last_id_ns
    with _id_lock:
        now = time.time_ns()
        if now <= _last_id_ns:
            now = _last_id_ns + 1
        _last_id_ns = now
    seconds, nanos = divmod(now, 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds)
    return f"{stamp:%Y%m%d-%H%M%S}.{nanos:09d}"