"""Decoding and encoding of JSON-RPC messages and batches."""

from __future__ import annotations

import json
from typing import Any, Iterable

from .model import (
    VERSION,
    Message,
    Notification,
    Request,
    Response,
    RpcError,
    invalid_request_error,
    parse_error,
)

_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _dumps(payload: Any) -> str:
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    for char, escape in _ESCAPES.items():
        text = text.replace(char, escape)
    return text


def _string_field(obj: dict, key: str, failure: str) -> str:
    value = obj.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise parse_error(failure)
    return value


def _error_from(value: Any) -> RpcError | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError("error must be an object")
    code = value.get("code")
    if code is None:
        code = 0
    if isinstance(code, bool) or not isinstance(code, int):
        raise ValueError("error code must be an integer")
    message = value.get("message")
    if message is None:
        message = ""
    if not isinstance(message, str):
        raise ValueError("error message must be a string")
    return RpcError(code, message, value.get("data"))


def _message_from_object(obj: Any) -> Message:
    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        raise parse_error("Invalid JSON")
    if "jsonrpc" not in obj:
        raise invalid_request_error("Missing jsonrpc field")
    version = obj["jsonrpc"]
    if version is None:
        version = ""
    if not isinstance(version, str):
        raise invalid_request_error("Invalid jsonrpc field")
    if version != VERSION:
        raise invalid_request_error('jsonrpc field must be "2.0"')

    message: Message
    if "method" in obj:
        if "id" in obj:
            method = _string_field(obj, "method", "Invalid request format")
            message = Request(method, obj.get("params"), obj["id"], version)
        else:
            method = _string_field(obj, "method", "Invalid notification format")
            message = Notification(method, obj.get("params"), version)
    elif "result" in obj or "error" in obj:
        try:
            error = _error_from(obj.get("error"))
        except ValueError:
            raise parse_error("Invalid response format") from None
        message = Response(obj.get("result"), error, obj.get("id"), version)
    else:
        raise invalid_request_error("Invalid message format")

    message.validate()
    return message


def parse_message(raw: str | bytes) -> Message:
    """Decode and validate one JSON-RPC message; raises RpcError on failure."""
    try:
        obj = json.loads(raw)
    except ValueError:
        raise parse_error("Invalid JSON") from None
    return _message_from_object(obj)


def _parse_batch(raw: str | bytes) -> list[Message]:
    try:
        items = json.loads(raw)
    except ValueError:
        raise parse_error("Invalid batch format") from None
    if not isinstance(items, list):
        raise parse_error("Invalid batch format")
    if not items:
        raise invalid_request_error("Batch array must not be empty")

    results: list[Message] = []
    for item in items:
        try:
            results.append(_message_from_object(item))
        except RpcError as err:
            results.append(Response(error=err, id=None))
    return results


def parse(raw: str | bytes) -> list[Message]:
    """Decode a single message or a batch into a list of messages.

    In a batch, a member that fails to decode is replaced by an error
    response with no id.
    """
    trimmed = raw.strip()
    if not trimmed:
        raise parse_error("Empty request body")
    first = trimmed[:1]
    if first in ("[", b"["):
        return _parse_batch(trimmed)
    if first in ("{", b"{"):
        return [parse_message(trimmed)]
    raise parse_error("Message must be a JSON object or array")


def marshal(message: Message) -> str:
    """Encode one message as compact JSON."""
    return _dumps(message.to_dict())


def marshal_batch(messages: Iterable[Message]) -> str:
    """Encode messages as a JSON array, or as a single object when there is one."""
    batch = list(messages)
    if not batch:
        raise invalid_request_error("Cannot marshal empty batch")
    if len(batch) == 1:
        return marshal(batch[0])
    return _dumps([message.to_dict() for message in batch])