import json
from typing import Any, Dict, Iterator, List, Union

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import parse
from eth_utils import function_signature_to_4byte_selector
from eth_utils.abi import collapse_if_tuple

from .errors import AbiError, AmbiguousFunctionError, UnknownFunctionError
from .models import FunctionSignature


class FunctionTable:
    """
    Functions of one contract ABI, addressable by name or full signature.

    Overloaded functions are all kept. A bare name only resolves when it is
    unique; otherwise the caller has to spell out ``name(type1,type2)``.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, List[FunctionSignature]] = {}
        self._by_signature: Dict[str, FunctionSignature] = {}

    def add(self, function: FunctionSignature) -> None:
        signature = function.signature
        if signature in self._by_signature:
            raise AbiError(f"Function {signature} is declared more than once.")
        self._by_signature[signature] = function
        self._by_name.setdefault(function.name, []).append(function)

    def lookup(self, name: str) -> FunctionSignature:
        key = (name or "").replace(" ", "")
        if "(" in key:
            function = self._by_signature.get(key)
            if function is None:
                raise UnknownFunctionError(f"Function {key} is not in the ABI.")
            return function

        candidates = self._by_name.get(key)
        if not candidates:
            raise UnknownFunctionError(f"Function {key} is not in the ABI.")
        if len(candidates) > 1:
            options = ", ".join(sorted(c.signature for c in candidates))
            raise AmbiguousFunctionError(
                f"Function {key} is overloaded; use one of: {options}."
            )
        return candidates[0]

    def __contains__(self, name: str) -> bool:
        try:
            self.lookup(name)
        except UnknownFunctionError:
            return False
        return True

    def __iter__(self) -> Iterator[FunctionSignature]:
        return iter(self._by_signature.values())

    def __len__(self) -> int:
        return len(self._by_signature)


def parse_abi(abi: Union[str, List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    if isinstance(abi, str):
        try:
            abi = json.loads(abi)
        except json.JSONDecodeError as exc:
            raise AbiError(f"ABI is not valid JSON: {exc.msg}.") from exc
    if not isinstance(abi, list):
        raise AbiError("ABI must be a list of descriptors.")
    return abi


def _types(entry: Dict[str, Any], key: str, name: str) -> tuple:
    params = entry.get(key, [])
    if params is None:
        params = []
    if not isinstance(params, list):
        raise AbiError(f"Function {name} has malformed {key}.")
    types = []
    for param in params:
        if not isinstance(param, dict) or not isinstance(param.get("type"), str):
            raise AbiError(f"Function {name} has a parameter without a type.")
        try:
            typ = collapse_if_tuple(param)
            parse(typ).validate()
        except (ABITypeError, ParseError, KeyError, TypeError) as exc:
            raise AbiError(f"Function {name} has invalid type {param['type']!r}: {exc}") from exc
        types.append(typ)
    return tuple(types)


def build_function_table(abi: Union[str, List[Dict[str, Any]]]) -> FunctionTable:
    """
    Build the function table for one contract ABI.

    Args:
        abi: ABI descriptors as a list or as a JSON string

    Returns:
        A :class:`FunctionTable` holding every ``function`` entry
    """
    table = FunctionTable()
    for entry in parse_abi(abi):
        if not isinstance(entry, dict):
            raise AbiError("ABI entries must be objects.")
        # Entries without a type default to "function" in the Solidity ABI.
        if entry.get("type", "function") != "function":
            continue

        name = entry.get("name")
        if not isinstance(name, str) or not name:
            raise AbiError("ABI function entry is missing a name.")

        inputs = _types(entry, "inputs", name)
        outputs = _types(entry, "outputs", name)
        table.add(
            FunctionSignature(
                name=name,
                inputs=inputs,
                outputs=outputs,
                selector=function_signature_to_4byte_selector(f"{name}({','.join(inputs)})"),
                state_mutability=entry.get("stateMutability"),
            )
        )
    return table
