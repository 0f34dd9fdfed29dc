# metamcp

A small library for JSON-RPC 2.0 messaging and for the version and
configuration side of the Model Context Protocol (MCP) handshake. It needs
nothing outside the standard library.

## Modules

- `metamcp.model` holds the message dataclasses `Request`, `Response` and
  `Notification`, each with `validate()` and `to_dict()`. It holds the
  `RpcError` exception and the `ErrorCode` enum. It has helpers that build
  errors: `standard_error`, `parse_error`, `invalid_request_error`,
  `method_not_found_error`, `invalid_params_error` and `internal_error`. It
  also has checks: `is_standard_error`, `is_server_error`,
  `is_application_error`, `validate_code`, `validate_id` and
  `validate_method`.
- `metamcp.codec` holds `parse_message`, `parse` for single messages and
  batches, `marshal` and `marshal_batch`.
- `metamcp.protocol` holds the MCP method, capability and log-level
  constants. It has the `McpErrorCode` enum and `mcp_error_message`. It has
  `HandshakeConfig` with its option helpers `with_handshake_timeout` and
  `with_supported_versions`. It has the version checks
  `is_version_supported` and `validate_version_compatibility`, and
  `generate_connection_id`.

## Installation

```
pip install .
```

## Usage

To build, validate, encode and decode messages:

```python
from metamcp.codec import parse, parse_message, marshal
from metamcp.model import Request

request = Request("get_user", {"id": 123, "name": "john_doe"}, "req-1")
request.validate()
data = marshal(request)
# '{"jsonrpc":"2.0","method":"get_user","params":{"id":123,"name":"john_doe"},"id":"req-1"}'

message = parse_message(data)
assert isinstance(message, Request) and message.is_request()

messages = parse('[{"jsonrpc":"2.0","method":"a","id":1},'
                 '{"jsonrpc":"2.0","method":"b"}]')
```

`parse` and `parse_message` accept either `str` or `bytes`. `marshal` and
`marshal_batch` return compact JSON text. `marshal_batch` writes a single
message as a plain object rather than as an array, and it raises on an empty
batch.

`parse` reads a batch entry by entry. An entry that is not valid does not
make the whole batch fail. In its place, `parse` returns an error `Response`
with no id.

`Request.bind_params(target)` converts the params into an instance of a
dataclass or a plain type. It returns `None` when the request has no
params.

Errors are exceptions:

```python
from metamcp.model import RpcError, ErrorCode, method_not_found_error

try:
    raise method_not_found_error("unknown_method")
except RpcError as exc:
    assert exc.code == ErrorCode.METHOD_NOT_FOUND
    response = exc.to_response("req-1")
```

To set up the handshake configuration and check versions:

```python
from metamcp.protocol import (
    HandshakeConfig, with_supported_versions, validate_version_compatibility,
)

config = HandshakeConfig.default()   # timeout 30 s, versions ["1.0", "0.1.0"]
with_supported_versions("2.0", "2.1")(config)
validate_version_compatibility("2.0", config.supported_versions)
```

When a version is not supported, `validate_version_compatibility` raises
`UnsupportedVersionError`, which is a subclass of `ValueError`.

## What it does not do

The package contains no server and no transport, and it does not read from
stdio or a socket. It does not track connections or their handshake state,
and it has no request hooks. `HandshakeConfig` and the version checks
describe a handshake, but the package does not carry one out.

## Running the tests

```
pip install .[test]
pytest
```