"""
Error types for batched contract calls.

Every stage of the pipeline raises a subclass of :class:`BatchCallError`
tagged with a ``kind`` so that a normalized failure still says which stage
produced it.
"""

from collections.abc import Mapping
from typing import Any, Optional


class BatchCallError(Exception):
    """Base exception for batched contract calls."""

    kind = "internal"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AbiError(BatchCallError):
    """Raised when a contract ABI cannot be turned into a function table."""

    kind = "abi"


class UnknownFunctionError(BatchCallError):
    """Raised when a call names a function absent from the ABI."""

    kind = "unknown_function"


class AmbiguousFunctionError(UnknownFunctionError):
    """Raised when a bare function name matches several overloads."""

    kind = "ambiguous_function"


class EncodingError(BatchCallError):
    """Raised when call arguments do not fit the function's inputs."""

    kind = "encoding"


class TransportError(BatchCallError):
    """Raised when the batch round trip fails as a whole."""

    kind = "transport"


class CorrelationError(BatchCallError):
    """Raised when responses cannot be matched one-to-one with requests."""

    kind = "correlation"


class MissingCorrelationError(CorrelationError):
    """Raised when a request id has no response."""

    def __init__(self, correlation_id: Any) -> None:
        super().__init__(f"No response for request id {correlation_id}.")
        self.correlation_id = correlation_id


class DecodingError(BatchCallError):
    """Raised when raw return data cannot be decoded with the function's outputs."""

    kind = "decoding"


def format_error(error: Any) -> str:
    """
    Reduce any error value to a human-readable message.

    Plain strings pass through unchanged; anything carrying a ``message``
    (a mapping key or an attribute) is unwrapped recursively.
    """
    if isinstance(error, str):
        return error

    if isinstance(error, Mapping) and "message" in error:
        return format_error(error["message"])

    message = getattr(error, "message", None)
    if message is not None and message is not error:
        return format_error(message)

    if isinstance(error, BaseException):
        return str(error) or error.__class__.__name__

    return str(error)


def error_kind(error: Any) -> Optional[str]:
    if isinstance(error, BatchCallError):
        return error.kind
    if isinstance(error, BaseException):
        return "internal"
    return None
