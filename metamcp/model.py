"""JSON-RPC 2.0 messages, error objects and their validation."""

from __future__ import annotations

import dataclasses
import json
import typing
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Union

VERSION = "2.0"

_STANDARD_MIN = -32768
_STANDARD_MAX = -32000
_SERVER_MIN = -32099


class ErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes and the server-defined ones used here."""

    PARSE = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL = -32603

    SERVER_ERROR = -32000
    NOT_IMPLEMENTED = -32001
    TIMEOUT = -32002
    RESOURCE_LIMIT = -32003
    UNAUTHORIZED = -32004
    FORBIDDEN = -32005
    NOT_FOUND = -32006
    CONFLICT = -32007
    TOO_MANY_REQUESTS = -32008
    BAD_GATEWAY = -32009
    SERVICE_UNAVAILABLE = -32010


_ERROR_MESSAGES = {
    ErrorCode.PARSE: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid Request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL: "Internal error",
    ErrorCode.SERVER_ERROR: "Server error",
    ErrorCode.NOT_IMPLEMENTED: "Method not implemented",
    ErrorCode.TIMEOUT: "Request timeout",
    ErrorCode.RESOURCE_LIMIT: "Resource limit exceeded",
    ErrorCode.UNAUTHORIZED: "Unauthorized access",
    ErrorCode.FORBIDDEN: "Forbidden operation",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.CONFLICT: "Resource conflict",
    ErrorCode.TOO_MANY_REQUESTS: "Rate limit exceeded",
    ErrorCode.BAD_GATEWAY: "Bad gateway",
    ErrorCode.SERVICE_UNAVAILABLE: "Service unavailable",
}


def _format_value(value: Any) -> str:
    """Render a value the way error strings show attached data."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{_format_value(k)}:{_format_value(v)}" for k, v in items) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(v) for v in value) + "]"
    return str(value)


def _canonical(value: Any) -> Any:
    """Prepare a payload for JSON encoding: mapping keys sorted, sequences as lists."""
    if isinstance(value, Mapping):
        return {k: _canonical(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, (list, tuple)):
        return [_canonical(v) for v in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _canonical(getattr(value, f.name)) for f in dataclasses.fields(value)}
    return value


class RpcError(Exception):
    """A JSON-RPC error object, raised as an exception."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        self.code = int(code)
        self.message = message
        self.data = data
        super().__init__(self.code, message, data)

    def __str__(self) -> str:
        if self.data is not None:
            return f"JSON-RPC error {self.code}: {self.message} (data: {_format_value(self.data)})"
        return f"JSON-RPC error {self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"RpcError(code={self.code!r}, message={self.message!r}, data={self.data!r})"

    def validate(self) -> None:
        """Raise an invalid-request error if the error object is incomplete."""
        if not self.message:
            raise invalid_request_error("error message is required")

    def to_response(self, id: Any) -> Response:
        """Wrap this error in a response carrying the given id."""
        return Response(error=self, id=id)

    def to_dict(self) -> dict[str, Any]:
        """The error object as a JSON-ready dictionary."""
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = _canonical(self.data)
        return out


def standard_error(code: int, data: Any = None) -> RpcError:
    """An error whose message is the standard one for its code."""
    try:
        message = _ERROR_MESSAGES[ErrorCode(code)]
    except ValueError:
        message = "Unknown error"
    return RpcError(code, message, data)


def parse_error(data: Any = None) -> RpcError:
    return standard_error(ErrorCode.PARSE, data)


def invalid_request_error(data: Any = None) -> RpcError:
    return standard_error(ErrorCode.INVALID_REQUEST, data)


def method_not_found_error(method: str) -> RpcError:
    return RpcError(ErrorCode.METHOD_NOT_FOUND, "Method not found", method)


def invalid_params_error(data: Any = None) -> RpcError:
    return standard_error(ErrorCode.INVALID_PARAMS, data)


def internal_error(data: Any = None) -> RpcError:
    return standard_error(ErrorCode.INTERNAL, data)


def is_standard_error(code: int) -> bool:
    """True for codes in the range the specification reserves."""
    return _STANDARD_MIN <= code <= _STANDARD_MAX


def is_server_error(code: int) -> bool:
    """True for codes in the implementation-defined server error range."""
    return _SERVER_MIN <= code <= _STANDARD_MAX


def is_application_error(code: int) -> bool:
    """True for codes outside the reserved range."""
    return code < _STANDARD_MIN or code > _STANDARD_MAX


def validate_code(code: int) -> int:
    """Check that a code is an integer; every integer is a valid error code."""
    if isinstance(code, bool) or not isinstance(code, int):
        raise TypeError(f"error code must be an integer, not {type(code).__name__}")
    return int(code)


def validate_id(id: Any) -> bool:
    """True if the id is a string, a number or None."""
    if id is None or isinstance(id, (str, float)):
        return True
    return isinstance(id, int) and not isinstance(id, bool)


def validate_method(method: str) -> bool:
    """True if the method name is non-empty and not reserved."""
    return bool(method) and not method.startswith("rpc.")


def _check_version(version: str) -> None:
    if version != VERSION:
        raise invalid_request_error('jsonrpc field must be "2.0"')


def _check_method(method: str) -> None:
    if not method:
        raise invalid_request_error("method field is required")
    if method.startswith("rpc."):
        raise method_not_found_error(method)


_NAMED_TYPES: dict[str, Any] = {
    "int": int,
    "str": str,
    "float": float,
    "bool": bool,
    "list": list,
    "dict": dict,
    "List": list,
    "Dict": dict,
    "Any": Any,
    "object": object,
}


def _field_type(field: dataclasses.Field) -> Any:
    """The field's type; string annotations are resolved for plain built-in types only."""
    annotation = field.type
    if isinstance(annotation, str):
        name = annotation.split("[", 1)[0].strip().rsplit(".", 1)[-1]
        return _NAMED_TYPES.get(name)
    return annotation


def _bind(value: Any, target: Any) -> Any:
    if value is None or target is None or target is Any or target is object:
        return value
    if isinstance(target, type) and dataclasses.is_dataclass(target):
        if not isinstance(value, dict):
            raise TypeError(f"cannot bind {type(value).__name__} to {target.__name__}")
        kwargs = {
            f.name: _bind(value[f.name], _field_type(f))
            for f in dataclasses.fields(target)
            if f.init and f.name in value
        }
        return target(**kwargs)
    if target is bool:
        if not isinstance(value, bool):
            raise TypeError(f"cannot bind {type(value).__name__} to bool")
        return value
    if target is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"cannot bind {type(value).__name__} to int")
        return value
    if target is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"cannot bind {type(value).__name__} to float")
        return float(value)
    container = typing.get_origin(target) or target
    if container in (str, list, dict):
        if not isinstance(value, container):
            raise TypeError(f"cannot bind {type(value).__name__} to {container.__name__}")
        return value
    return value


@dataclass
class Request:
    """A JSON-RPC request; without an id it is a notification."""

    method: str
    params: Any = None
    id: Any = None
    jsonrpc: str = VERSION

    def validate(self) -> None:
        """Raise an RpcError if the request breaks the specification."""
        _check_version(self.jsonrpc)
        _check_method(self.method)
        if not validate_id(self.id):
            raise invalid_request_error("ID must be a string, number, or null")

    def is_request(self) -> bool:
        return self.id is not None

    def is_notification(self) -> bool:
        return self.id is None

    def bind_params(self, target: Any) -> Any:
        """Convert the params into an instance of ``target`` (a dataclass or plain type).

        Returns None when the request carries no params.
        """
        if self.params is None:
            return None
        try:
            encoded = json.dumps(_canonical(self.params))
        except (TypeError, ValueError, RecursionError) as exc:
            raise RpcError(ErrorCode.INTERNAL, "Failed to re-marshal params", str(exc)) from exc
        try:
            return _bind(json.loads(encoded), target)
        except (TypeError, ValueError) as exc:
            raise RpcError(
                ErrorCode.INVALID_PARAMS, "Failed to bind params to target", str(exc)
            ) from exc

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            out["params"] = _canonical(self.params)
        if self.id is not None:
            out["id"] = self.id
        return out


@dataclass
class Response:
    """A JSON-RPC response holding either a result or an error."""

    result: Any = None
    error: RpcError | None = None
    id: Any = None
    jsonrpc: str = VERSION

    def validate(self) -> None:
        """Raise an RpcError if the response breaks the specification."""
        _check_version(self.jsonrpc)
        if self.result is not None and self.error is not None:
            raise invalid_request_error("response cannot have both result and error")
        if self.result is None and self.error is None:
            raise invalid_request_error("response must have either result or error")
        if self.error is not None:
            self.error.validate()

    def has_result(self) -> bool:
        return self.error is None and self.result is not None

    def has_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.result is not None:
            out["result"] = _canonical(self.result)
        if self.error is not None:
            out["error"] = self.error.to_dict()
        out["id"] = self.id
        return out


@dataclass
class Notification:
    """A JSON-RPC notification: a method call that expects no response."""

    method: str
    params: Any = None
    jsonrpc: str = VERSION

    def validate(self) -> None:
        """Raise an RpcError if the notification breaks the specification."""
        _check_version(self.jsonrpc)
        _check_method(self.method)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            out["params"] = _canonical(self.params)
        return out


Message = Union[Request, Response, Notification]