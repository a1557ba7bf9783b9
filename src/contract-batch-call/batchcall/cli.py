import argparse
import json
import sys
from typing import Any, Optional

from .config import load_config
from .logger import setup_logging
from .service import ContractCallService


def _load_json_file(path: str, what: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{what} file {path} is not valid JSON: {exc.msg}.") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Batch read-only contract calls into one JSON-RPC request.",
        allow_abbrev=False,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    call_parser = subparsers.add_parser("call", help="Execute a batch of contract calls")
    call_parser.add_argument(
        "--abi",
        required=True,
        help="Path to the contract ABI JSON file.",
    )
    call_parser.add_argument(
        "--calls",
        required=True,
        help="Path to a JSON array of calls: {contract_address, function_name, args, block_number?}.",
    )
    call_parser.add_argument(
        "--isolate-failures",
        action="store_true",
        default=None,
        help="Report failures per call instead of failing the whole batch. Defaults to ISOLATE_FAILURES env.",
    )

    encode_parser = subparsers.add_parser("encode", help="Encode call data for one function")
    encode_parser.add_argument(
        "--abi",
        required=True,
        help="Path to the contract ABI JSON file.",
    )
    encode_parser.add_argument(
        "--function",
        required=True,
        help="Function name, or full signature for overloaded functions (e.g. transfer(address,uint256)).",
    )
    encode_parser.add_argument(
        "--args",
        required=False,
        default="[]",
        help="JSON array of arguments. Defaults to [].",
    )

    functions_parser = subparsers.add_parser("functions", help="List functions declared in an ABI")
    functions_parser.add_argument(
        "--abi",
        required=True,
        help="Path to the contract ABI JSON file.",
    )

    subparsers.add_parser("block-number", help="Fetch the latest block number from the node")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
        setup_logging(config.log_level)
        service = ContractCallService(config)

        if args.command == "call":
            abi = _load_json_file(args.abi, "ABI")
            calls = _load_json_file(args.calls, "Calls")
            if not isinstance(calls, list):
                raise ValueError("Calls file must contain a JSON array.")
            result = service.execute(calls, abi, isolate_failures=args.isolate_failures)
            print(json.dumps(result, indent=2))
            if isinstance(result, dict) and not result.get("ok"):
                sys.exit(1)
        elif args.command == "encode":
            abi = _load_json_file(args.abi, "ABI")
            call_args = json.loads(args.args)
            if not isinstance(call_args, list):
                raise ValueError("--args must be a JSON array.")
            result = service.encode_function_data(abi, args.function, call_args)
            print(json.dumps(result, indent=2))
        elif args.command == "functions":
            abi = _load_json_file(args.abi, "ABI")
            print(json.dumps(service.list_functions(abi), indent=2))
        elif args.command == "block-number":
            print(json.dumps(service.get_block_number(), indent=2))
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
