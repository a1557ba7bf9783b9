"""
MCP server exposing batched read-only contract calls over JSON-RPC.
"""

import argparse
from collections.abc import Mapping
from typing import Any, Optional, Union

from mcp.server.fastmcp import FastMCP

from .config import load_config
from .logger import setup_logging
from .service import ContractCallService

server = FastMCP(
    name="contract-batch-call",
    instructions="Execute many read-only contract functions in a single eth_call JSON-RPC batch.",
)

_service: Optional[ContractCallService] = None


def _get_service() -> ContractCallService:
    global _service
    if _service is None:
        cfg = load_config()
        _service = ContractCallService(cfg)
    return _service


def _normalize_array_param(value: Optional[Any], name: str, wrap_scalars: bool = True) -> Optional[list]:
    """
    Ensure a parameter intended as an array is actually treated as one:
    - str/bytes: likely misuse, raise with guidance
    - list/tuple: keep as list
    - Mapping: reject (not an array)
    - other scalars: auto-wrap into single-element list, or reject when wrap_scalars is False
    """
    if value is None:
        return None
    if isinstance(value, (str, bytes, bytearray)):
        raise ValueError(f"{name} must be an array (e.g. ['0x...', 123]); got a string/bytes.")
    if isinstance(value, Mapping):
        raise ValueError(f"{name} must be an array, not an object/map.")
    if isinstance(value, (list, tuple)):
        return list(value)
    if not wrap_scalars:
        raise ValueError(f"{name} must be an array; got {type(value).__name__}.")
    return [value]


@server.tool(
    name="batch_call",
    title="Batch Read-Only Calls",
    description=(
        "Execute read-only functions of one contract ABI in a single JSON-RPC batch. "
        "`calls` is an array of {contract_address, function_name, args, block_number?}; "
        "`abi` is the contract ABI (array or JSON string). Returns one {ok, value|error} per call, "
        "or a single {ok: false, error} when the whole batch failed."
    ),
)
def batch_call(
    calls: Any,
    abi: Union[list, str],
    isolate_failures: Optional[bool] = None,
) -> Union[list, dict]:
    svc = _get_service()
    normalized_calls = _normalize_array_param(calls, "calls", wrap_scalars=False) or []
    return svc.execute(normalized_calls, abi, isolate_failures=isolate_failures)


@server.tool(
    name="encode_function_data",
    title="Encode Function Call",
    description="Compute selector and ABI-encoded call data for a function of the given ABI. `args` must be an array.",
)
def encode_function_data(abi: Union[list, str], function: str, args: Optional[Any] = None) -> dict:
    svc = _get_service()
    normalized_args = _normalize_array_param(args, "args")
    return svc.encode_function_data(abi, function, normalized_args)


@server.tool(
    name="list_functions",
    title="List ABI Functions",
    description="List functions declared in an ABI with their signatures, selectors, inputs and outputs.",
)
def list_functions(abi: Union[list, str]) -> list:
    svc = _get_service()
    return svc.list_functions(abi)


@server.tool(
    name="get_block_number",
    title="Get Latest Block Number",
    description="Fetch the latest block number known to the configured RPC node.",
)
def get_block_number() -> dict:
    svc = _get_service()
    return svc.get_block_number()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the contract batch call MCP server.")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport protocol for MCP.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--mount-path",
        default="/",
        help="Mount path for SSE transport (only when transport=sse).",
    )
    args = parser.parse_args()

    setup_logging(_get_service().config.log_level)

    # FastMCP uses host/port only for SSE/HTTP transports; stdio ignores them.
    server.settings.host = args.host
    server.settings.port = args.port

    if args.transport == "sse":
        server.run(transport="sse", mount_path=args.mount_path)
    else:
        server.run(transport=args.transport)


if __name__ == "__main__":
    main()
