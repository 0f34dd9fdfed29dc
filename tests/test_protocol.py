import re

import pytest

from metamcp.protocol import (
    HandshakeConfig,
    McpErrorCode,
    UnsupportedVersionError,
    generate_connection_id,
    is_version_supported,
    mcp_error_message,
    validate_version_compatibility,
    with_handshake_timeout,
    with_supported_versions,
)

SUPPORTED = ["1.0", "0.1.0", "2.0"]


def test_default_handshake_config():
    config = HandshakeConfig.default()
    assert config.name == "Meta-MCP Server"
    assert config.version == "1.0.0"
    assert config.handshake_timeout == 30.0
    assert len(config.supported_versions) == 2
    assert config.supported_versions == ["1.0", "0.1.0"]


def test_default_configs_do_not_share_version_lists():
    first = HandshakeConfig.default()
    second = HandshakeConfig.default()
    first.supported_versions.append("9.9")
    assert second.supported_versions == ["1.0", "0.1.0"]


def test_with_handshake_timeout():
    config = HandshakeConfig.default()
    modifier = with_handshake_timeout(5.0)
    modifier(config)
    assert config.handshake_timeout == 5.0


def test_with_supported_versions():
    config = HandshakeConfig.default()
    modifier = with_supported_versions("2.0", "2.1")
    modifier(config)
    assert len(config.supported_versions) == 2
    assert config.supported_versions[0] == "2.0"
    assert config.supported_versions == ["2.0", "2.1"]


@pytest.mark.parametrize(
    "version, expected",
    [("1.0", True), ("0.1.0", True), ("2.0", True), ("3.0", False), ("", False)],
)
def test_is_version_supported(version, expected):
    assert is_version_supported(version, SUPPORTED) is expected


def test_validate_version_compatibility_supported():
    assert validate_version_compatibility("1.0", SUPPORTED) is None


@pytest.mark.parametrize(
    "client_version, supported",
    [("3.0", SUPPORTED), ("", SUPPORTED), ("1.0", [])],
)
def test_validate_version_compatibility_rejects(client_version, supported):
    with pytest.raises(UnsupportedVersionError):
        validate_version_compatibility(client_version, supported)


def test_unsupported_version_message():
    with pytest.raises(UnsupportedVersionError) as info:
        validate_version_compatibility("3.0", SUPPORTED)
    assert str(info.value) == "unsupported protocol version: 3.0 (supported: [1.0 0.1.0 2.0])"
    assert info.value.client_version == "3.0"
    assert isinstance(info.value, ValueError)


def test_generate_connection_id_unique_and_formatted():
    first = generate_connection_id()
    second = generate_connection_id()
    assert first != ""
    assert first != second
    assert len(first) >= 10
    assert re.fullmatch(r"\d{8}-\d{6}\.\d{9}", first)


def test_generate_connection_ids_are_distinct_in_bulk():
    ids = [generate_connection_id() for _ in range(200)]
    assert len(set(ids)) == 200


@pytest.mark.parametrize(
    "code, message",
    [
        (McpErrorCode.RESOURCE_NOT_FOUND, "Resource not found"),
        (McpErrorCode.PROTOCOL_MISMATCH, "Protocol version mismatch"),
        (McpErrorCode.SERVER_NOT_INITIALIZED, "Server not initialized"),
        (-32009, "Rate limit exceeded"),
    ],
)
def test_mcp_error_message(code, message):
    assert mcp_error_message(code) == message


@pytest.mark.parametrize("code", [McpErrorCode.INVALID_REQUEST, -1, 12345])
def test_mcp_error_message_unknown(code):
    assert mcp_error_message(code) is None


def test_server_not_initialized_code():
    assert McpErrorCode.SERVER_NOT_INITIALIZED == -32011
    assert McpErrorCode(-32007) is McpErrorCode.PROTOCOL_MISMATCH