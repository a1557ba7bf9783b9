import re
from typing import Any, Dict, Optional, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_abi.grammar import ABIType, TupleType, parse
from eth_utils import to_bytes

from .errors import EncodingError
from .models import CorrelationId, FunctionSignature
from .rpc_client import build_request, integer_to_quantity

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
LATEST_BLOCK_TAG = "latest"


def normalize_address(address: str) -> str:
    if not isinstance(address, str):
        raise EncodingError("Address must be a string.")

    candidate = address.strip()
    if not candidate.startswith("0x"):
        candidate = f"0x{candidate}"

    if not ADDRESS_PATTERN.match(candidate):
        raise EncodingError(
            f"Invalid address {address!r}. Expected 0x-prefixed 40 hex characters."
        )

    return candidate.lower()


def block_tag(block_number: Optional[int]) -> str:
    """Wire tag for ``block_number``: ``latest`` when absent, hex quantity otherwise."""
    if block_number is None:
        return LATEST_BLOCK_TAG
    if isinstance(block_number, bool) or not isinstance(block_number, int):
        raise EncodingError("block_number must be a non-negative integer.")
    if block_number < 0:
        raise EncodingError("block_number must be non-negative.")
    return integer_to_quantity(block_number)


def _coerce_arg(abi_type: ABIType, value: Any, field: str) -> Any:
    """Accept 0x-hex strings wherever ``bytes``/``bytesN`` is expected, arrays and tuples included."""
    if abi_type.is_array:
        if isinstance(value, (list, tuple)):
            return [_coerce_arg(abi_type.item_type, v, field) for v in value]
        return value

    if isinstance(abi_type, TupleType):
        if isinstance(value, (list, tuple)) and len(value) == len(abi_type.components):
            return tuple(_coerce_arg(t, v, field) for t, v in zip(abi_type.components, value))
        return value

    if abi_type.base == "bytes" and isinstance(value, str):
        try:
            return to_bytes(hexstr=value.strip())
        except ValueError as exc:
            raise EncodingError(f"{field} must be a hex string or bytes, got {value!r}.") from exc
    return value


def encode_function_call(function: FunctionSignature, args: Sequence[Any]) -> str:
    """Encode selector + arguments of ``function`` into 0x-prefixed call data."""
    if len(args) != len(function.inputs):
        raise EncodingError(
            f"Argument count mismatch for {function.signature}: "
            f"expected {len(function.inputs)}, got {len(args)}."
        )

    values = [
        _coerce_arg(parse(typ), arg, f"Argument {position} of {function.signature}")
        for position, (typ, arg) in enumerate(zip(function.inputs, args))
    ]
    try:
        encoded = encode(list(function.inputs), values)
    except (AbiEncodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"Failed to encode arguments for {function.signature}: {exc}") from exc

    return "0x" + function.selector.hex() + encoded.hex()


def eth_call_request(
    data: str,
    contract_address: str,
    correlation_id: CorrelationId,
    block_number: Optional[int] = None,
) -> Dict[str, Any]:
    return build_request(
        correlation_id,
        "eth_call",
        [{"to": normalize_address(contract_address), "data": data}, block_tag(block_number)],
    )
