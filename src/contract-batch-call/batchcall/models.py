from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, NewType, Optional, Sequence, Tuple

#: Join key between an outgoing request and its response within one batch.
CorrelationId = NewType("CorrelationId", int)


def to_jsonable(value: Any) -> Any:
    """Render decoded ABI values with JSON types (bytes as 0x hex, tuples as lists)."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


@dataclass(frozen=True)
class CallSpec:
    """One read-only contract function invocation requested by the caller.

    ``block_number`` of ``None`` means the latest block as seen by the node.
    """

    contract_address: str
    function_name: str
    args: Tuple[Any, ...] = ()
    block_number: Optional[int] = None

    def __post_init__(self) -> None:
        # Frozen, so lists handed in by callers are stored as tuples.
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    @staticmethod
    def from_dict(data: Mapping) -> CallSpec:
        """
        Build a :class:`CallSpec` from its JSON shape.

        Accepts ``contract_address`` or ``address`` and ``function_name`` or
        ``function`` so that hand-written call files stay short.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Each call must be an object.")

        address = data.get("contract_address", data.get("address"))
        function_name = data.get("function_name", data.get("function"))
        if not isinstance(address, str) or not address.strip():
            raise ValueError("Call is missing contract_address.")
        if not isinstance(function_name, str) or not function_name.strip():
            raise ValueError("Call is missing function_name.")

        args = data.get("args") or []
        if isinstance(args, (str, bytes, bytearray)) or not isinstance(args, Sequence):
            raise ValueError("Call args must be an array.")

        return CallSpec(
            contract_address=address,
            function_name=function_name.strip(),
            args=tuple(args),
            block_number=data.get("block_number"),
        )


@dataclass(frozen=True)
class FunctionSignature:
    """Inputs and outputs of one ABI function."""

    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    selector: bytes
    state_mutability: Optional[str] = None

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "signature": self.signature,
            "selector": "0x" + self.selector.hex(),
            "inputs": list(self.inputs),
            "outputs": list(self.outputs),
            "state_mutability": self.state_mutability,
        }


@dataclass(frozen=True)
class CallResult:
    """Outcome of one call, or of a whole invocation that failed."""

    ok: bool
    value: Any = None
    error: Optional[str] = None
    kind: Optional[str] = None

    @staticmethod
    def success(value: Any) -> CallResult:
        return CallResult(ok=True, value=value)

    @staticmethod
    def failure(message: str, kind: Optional[str] = None) -> CallResult:
        return CallResult(ok=False, error=message, kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": True, "value": to_jsonable(self.value)}
        return {"ok": False, "error": self.error, "kind": self.kind}


@dataclass
class PendingCall:
    """A call that made it through encoding and waits for its response."""

    correlation_id: CorrelationId
    call: CallSpec
    function: FunctionSignature
    request: Dict[str, Any] = field(default_factory=dict)


def assign_correlation_ids(calls: Sequence[CallSpec]) -> List[Tuple[CorrelationId, CallSpec]]:
    """Pair every call with an id unique within the batch (its input position)."""
    return [(CorrelationId(index), call) for index, call in enumerate(calls)]
