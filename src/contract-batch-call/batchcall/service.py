from typing import Any, Dict, List, Optional, Sequence, Union

from .config import Config
from .contract import CallInput, execute_contract_functions
from .encoder import encode_function_call
from .functions import build_function_table
from .rpc_client import RpcClient


class ContractCallService:
    """Combine configuration and an RPC client to serve batched contract calls."""

    def __init__(self, config: Config, client: Optional[RpcClient] = None) -> None:
        self.config = config
        self.client = client or RpcClient(
            rpc_url=config.rpc_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
            max_batch_size=config.max_batch_size,
        )

    def execute(
        self,
        calls: Sequence[CallInput],
        abi: Any,
        isolate_failures: Optional[bool] = None,
    ) -> Union[List[Dict[str, Any]], Dict[str, Any]]:
        if isolate_failures is None:
            isolate_failures = self.config.isolate_failures

        outcome = execute_contract_functions(calls, abi, self.client, isolate_failures=isolate_failures)
        if isinstance(outcome, list):
            return [result.to_dict() for result in outcome]
        return outcome.to_dict()

    def encode_function_data(self, abi: Any, function: str, args: Optional[List[Any]] = None) -> Dict[str, str]:
        signature = build_function_table(abi).lookup(function)
        data = encode_function_call(signature, args or [])
        return {
            "function": function,
            "signature": signature.signature,
            "selector": "0x" + signature.selector.hex(),
            "data": data,
        }

    def list_functions(self, abi: Any) -> List[Dict[str, Any]]:
        return [function.to_dict() for function in build_function_table(abi)]

    def get_block_number(self) -> Dict[str, int]:
        return {"block_number": self.client.get_block_number()}
