"""Utility helpers shared across the adapter."""

from walletlink.utils.encoding import (
    ensure_address_string,
    ensure_big_int,
    ensure_bytes,
    ensure_int_number,
    ensure_parsed_json_object,
    hex_string_from_int,
    param_at,
)

__all__ = [
    "ensure_address_string",
    "ensure_big_int",
    "ensure_bytes",
    "ensure_int_number",
    "ensure_parsed_json_object",
    "hex_string_from_int",
    "param_at",
]
