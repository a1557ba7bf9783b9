from typing import Any, Mapping

from eth_abi import decode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_utils import to_bytes

from .errors import DecodingError
from .models import CallResult, FunctionSignature


def _result_bytes(result: Any, function: FunctionSignature) -> bytes:
    if not isinstance(result, str):
        raise DecodingError(f"Unexpected non-hex result for {function.signature}.")
    try:
        return to_bytes(hexstr=result)
    except ValueError as exc:
        raise DecodingError(f"Malformed hex result for {function.signature}: {exc}") from exc


def decode_values(data: bytes, function: FunctionSignature) -> Any:
    """
    Decode return data of ``function``.

    A single output is unwrapped; several outputs come back as a tuple.
    """
    try:
        values = decode(list(function.outputs), data)
    except (AbiDecodingError, TypeError, ValueError) as exc:
        raise DecodingError(f"Failed to decode result of {function.signature}: {exc}") from exc

    if len(values) == 1:
        return values[0]
    return tuple(values)


def decode_result(response: Mapping[str, Any], function: FunctionSignature) -> CallResult:
    """
    Turn one correlated response into a :class:`CallResult`.

    An ``error`` object from the node (a revert, for instance) is a failure of
    this call only. Malformed data raises :class:`DecodingError`.
    """
    error_obj = response.get("error")
    if error_obj is not None:
        if isinstance(error_obj, Mapping):
            return CallResult.failure(f"({error_obj.get('code')}) {error_obj.get('message')}", "rpc")
        return CallResult.failure(str(error_obj), "rpc")

    if "result" not in response:
        raise DecodingError(f"Response {response.get('id')!r} has neither result nor error.")

    data = _result_bytes(response["result"], function)
    return CallResult.success(decode_values(data, function))
