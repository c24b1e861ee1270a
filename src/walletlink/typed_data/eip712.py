"""EIP-712 typed data hashing.

Three procedures are supported:
- Legacy (eth_signTypedData_v1): a flat list of ``{type, name, value}``
  entries, hashed with tightly packed encoding
- v3: structured data, arrays unsupported
- v4: structured data with arrays and null nested structs

Each function maps a decoded typed-data document to the 32-byte digest the
wallet signs without any further prefix.
"""

import re
from typing import Any, Optional

from eth_abi import encode
from eth_abi.packed import encode_packed
from eth_utils import keccak, to_checksum_address

from walletlink.errors import InvalidParamsError

_TYPE_NAME = re.compile(r"^\w*")
_BARE_INT = re.compile(r"^(u?int)(?=$|\[)")
_BARE_FIXED_BYTE = re.compile(r"^byte(?=$|\[)")


def _abi_type(type_: str) -> str:
    """Elementary ABI name for a Solidity type (uint -> uint256)."""
    type_ = _BARE_INT.sub(r"\g<1>256", type_)
    return _BARE_FIXED_BYTE.sub("bytes1", type_)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    if isinstance(value, str):
        if value.startswith("0x"):
            body = value[2:]
            return bytes.fromhex(body if len(body) % 2 == 0 else "0" + body)
        return value.encode("utf-8")
    raise InvalidParamsError(f"Cannot convert {value!r} to bytes")


def _coerce(type_: str, value: Any) -> Any:
    """Python value accepted by eth_abi for an atomic type."""
    if type_ == "address":
        if isinstance(value, str):
            return to_checksum_address(value)
        return value
    if type_ == "bool":
        if isinstance(value, str):
            return value.lower() not in ("", "false", "0")
        return bool(value)
    if type_.startswith(("uint", "int")):
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, str):
            lowered = value.lower()
            if lowered.startswith(("0x", "-0x")):
                return int(lowered, 16)
            return int(lowered, 10)
        if isinstance(value, float):
            return int(value)
        return value
    if type_ == "bytes" or re.match(r"^bytes\d+$", type_):
        return _to_bytes(value)
    return value


def _find_type_dependencies(
    primary_type: str, types: dict, results: Optional[list[str]] = None
) -> list[str]:
    results = [] if results is None else results
    name = _TYPE_NAME.match(primary_type).group(0)
    if name in results or name not in types:
        return results
    results.append(name)
    for field in types[name]:
        for dep in _find_type_dependencies(field["type"], types, results):
            if dep not in results:
                results.append(dep)
    return results


def encode_type(primary_type: str, types: dict) -> str:
    """Canonical type string, e.g. ``Mail(Person from,...)Person(...)``."""
    deps = [d for d in _find_type_dependencies(primary_type, types) if d != primary_type]
    result = []
    for type_name in [primary_type] + sorted(deps):
        fields = types.get(type_name)
        if fields is None:
            raise InvalidParamsError(f"No type definition specified: {type_name}")
        members = ",".join(f"{field['type']} {field['name']}" for field in fields)
        result.append(f"{type_name}({members})")
    return "".join(result)


def hash_type(primary_type: str, types: dict) -> bytes:
    return keccak(text=encode_type(primary_type, types))


def _encode_field_v4(types: dict, name: str, type_: str, value: Any) -> tuple[str, Any]:
    if type_ in types:
        if value is None:
            return "bytes32", bytes(32)
        return "bytes32", keccak(encode_data(type_, value, types, use_v4=True))

    if value is None:
        raise InvalidParamsError(f"missing value for field {name} of type {type_}")

    if type_ == "bytes":
        return "bytes32", keccak(_to_bytes(value))

    if type_ == "string":
        return "bytes32", keccak(value.encode("utf-8") if isinstance(value, str) else value)

    if type_.endswith("]"):
        item_type = type_[: type_.rindex("[")]
        pairs = [_encode_field_v4(types, name, item_type, item) for item in value]
        encoded = encode([_abi_type(t) for t, _ in pairs], [v for _, v in pairs])
        return "bytes32", keccak(encoded)

    return type_, _coerce(_abi_type(type_), value)


def encode_data(primary_type: str, data: dict, types: dict, use_v4: bool = True) -> bytes:
    """ABI-encode a struct value (type hash followed by its members)."""
    if not isinstance(data, dict):
        raise InvalidParamsError(f"Expected an object for type {primary_type}")

    encoded_types = ["bytes32"]
    encoded_values: list[Any] = [hash_type(primary_type, types)]

    for field in types[primary_type]:
        name, type_ = field["name"], field["type"]
        value = data.get(name)
        if use_v4:
            t, v = _encode_field_v4(types, name, type_, value)
            encoded_types.append(_abi_type(t))
            encoded_values.append(v)
            continue

        if value is None:
            continue
        if type_ == "bytes":
            encoded_types.append("bytes32")
            encoded_values.append(keccak(_to_bytes(value)))
        elif type_ == "string":
            encoded_types.append("bytes32")
            encoded_values.append(
                keccak(value.encode("utf-8") if isinstance(value, str) else value)
            )
        elif type_ in types:
            encoded_types.append("bytes32")
            encoded_values.append(keccak(encode_data(type_, value, types, use_v4=False)))
        elif type_.endswith("]"):
            raise InvalidParamsError("Arrays are unimplemented in encodeData; use V4 extension")
        else:
            encoded_types.append(_abi_type(type_))
            encoded_values.append(_coerce(_abi_type(type_), value))

    return encode(encoded_types, encoded_values)


def hash_struct(primary_type: str, data: dict, types: dict, use_v4: bool = True) -> bytes:
    return keccak(encode_data(primary_type, data, types, use_v4))


def _sanitize(typed_data: Any) -> dict:
    if not isinstance(typed_data, dict):
        raise InvalidParamsError("Typed data must be an object")
    types = dict(typed_data.get("types") or {})
    types.setdefault("EIP712Domain", [])
    primary_type = typed_data.get("primaryType")
    if not isinstance(primary_type, str) or primary_type not in types:
        raise InvalidParamsError(f"Unknown primaryType: {primary_type}")
    return {
        "types": types,
        "primaryType": primary_type,
        "domain": typed_data.get("domain") or {},
        "message": typed_data.get("message") or {},
    }


def _hash_typed_data(typed_data: Any, use_v4: bool) -> bytes:
    sanitized = _sanitize(typed_data)
    types = sanitized["types"]
    parts = [b"\x19\x01", hash_struct("EIP712Domain", sanitized["domain"], types, use_v4)]
    if sanitized["primaryType"] != "EIP712Domain":
        parts.append(hash_struct(sanitized["primaryType"], sanitized["message"], types, use_v4))
    return keccak(b"".join(parts))


def hash_for_sign_typed_data_v3(typed_data: Any) -> bytes:
    return _hash_typed_data(typed_data, use_v4=False)


def hash_for_sign_typed_data_v4(typed_data: Any) -> bytes:
    return _hash_typed_data(typed_data, use_v4=True)


def hash_for_sign_typed_data_legacy(typed_data: Any) -> bytes:
    """Hash a legacy ``[{type, name, value}, ...]`` document."""
    if not isinstance(typed_data, list) or not typed_data:
        raise InvalidParamsError("Expected a non-empty array of typed data entries")

    types: list[str] = []
    values: list[Any] = []
    schema: list[str] = []
    for entry in typed_data:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise InvalidParamsError("Typed data entries must have a name")
        type_ = entry.get("type")
        if not isinstance(type_, str) or not type_:
            raise InvalidParamsError(f"Typed data entry {entry['name']} has no type")
        types.append(_abi_type(type_))
        values.append(_coerce(_abi_type(type_), entry.get("value")))
        schema.append(f"{type_} {entry['name']}")

    schema_hash = keccak(encode_packed(["string"] * len(schema), schema))
    data_hash = keccak(encode_packed(types, values))
    return keccak(encode_packed(["bytes32", "bytes32"], [schema_hash, data_hash]))
