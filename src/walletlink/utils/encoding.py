"""Coercion of loosely typed JSON-RPC parameters.

Callers send numbers as ints, decimal strings or 0x-prefixed hex strings,
binary data as hex or plain text, and addresses in any case. These helpers
turn them into canonical Python values or raise InvalidParamsError.
"""

import json
import re
from typing import Any

from eth_utils import add_0x_prefix, remove_0x_prefix

from walletlink.errors import InvalidParamsError

_HEX_BODY = re.compile(r"^[0-9a-f]*$")
_INT_STRING = re.compile(r"^[0-9]+$")


def is_hex_string(value: Any) -> bool:
    """True for strings made only of hex digits, with or without 0x."""
    if not isinstance(value, str):
        return False
    return bool(_HEX_BODY.match(remove_0x_prefix(value.lower())))


def _even_length_hex(value: str) -> str:
    body = remove_0x_prefix(value.lower())
    return body if len(body) % 2 == 0 else "0" + body


def ensure_address_string(value: Any) -> str:
    """Canonical form of an Ethereum address: 0x + 40 lowercase hex chars."""
    if isinstance(value, str):
        lowered = value.lower()
        if is_hex_string(lowered):
            body = remove_0x_prefix(lowered)
            if len(body) == 40:
                return add_0x_prefix(body)
    raise InvalidParamsError(f"Invalid Ethereum address: {value}")


def ensure_bytes(value: Any) -> bytes:
    """Binary data from bytes, a hex string, or a UTF-8 string."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        if is_hex_string(value):
            return bytes.fromhex(_even_length_hex(value))
        return value.encode("utf-8")
    raise InvalidParamsError(f"Not binary data: {value}")


def ensure_big_int(value: Any) -> int:
    """Non-negative arbitrary precision integer (wei amounts, gas)."""
    if isinstance(value, bool):
        raise InvalidParamsError(f"Not an integer: {value}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidParamsError(f"Not a non-negative integer: {value}")
        return value
    if isinstance(value, str) and value:
        if _INT_STRING.match(value):
            return int(value, 10)
        if is_hex_string(value) and remove_0x_prefix(value):
            return int(_even_length_hex(value), 16)
    raise InvalidParamsError(f"Not an integer: {value}")


def ensure_int_number(value: Any) -> int:
    """Integer from an int, a decimal string or a hex string."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return ensure_big_int(value)


def hex_string_from_int(value: int) -> str:
    return hex(value)


def ensure_parsed_json_object(value: Any) -> Any:
    """Accept an already-decoded JSON document or a JSON string."""
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidParamsError(f"Expected JSON: {value}") from e
    raise InvalidParamsError(f"Not a JSON string: {value}")


def param_at(params: Any, index: int) -> Any:
    """Positional parameter or None when absent."""
    if isinstance(params, (list, tuple)) and index < len(params):
        return params[index]
    return None
