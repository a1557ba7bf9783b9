"""
Smart contract read-only functions executed in one ``eth_call`` batch.

:func:`execute_contract_functions` is the entry point. It builds the
function table from the ABI, encodes one ``eth_call`` per call, sends them
as a single JSON-RPC batch, matches responses back by id and decodes each
one with its function's outputs.

Failure model:

* by default any error in the pipeline (unknown function, bad arguments,
  transport failure, missing response, undecodable data) replaces the whole
  output with a single failure :class:`CallResult`;
* with ``isolate_failures=True`` those errors land in the slot of the call
  that caused them, and only transport or ABI failures fail the whole batch.

A node-side error object on an individual response (a revert) is always a
failure of that call's slot only.

Example:
    ::

        from batchcall.contract import execute_contract_functions
        from batchcall.models import CallSpec
        from batchcall.rpc_client import RpcClient

        calls = [
            CallSpec(dai, "balanceOf", [holder]),
            CallSpec(dai, "totalSupply", [], block_number=15632000),
        ]
        results = execute_contract_functions(calls, erc20_abi, RpcClient(rpc_url))
        # => [CallResult(ok=True, value=...), CallResult(ok=True, value=...)]
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Sequence, Union

from .correlator import ResponseIndex, index_responses
from .decoder import decode_result
from .encoder import encode_function_call, eth_call_request
from .errors import BatchCallError, EncodingError, TransportError, error_kind, format_error
from .functions import FunctionTable, build_function_table
from .models import CallResult, CallSpec, CorrelationId, PendingCall, assign_correlation_ids
from .rpc_client import BatchTransport

logger = logging.getLogger(__name__)

CallInput = Union[CallSpec, Mapping]


def _to_call_spec(call: CallInput) -> CallSpec:
    if isinstance(call, CallSpec):
        return call
    try:
        return CallSpec.from_dict(call)
    except ValueError as exc:
        raise EncodingError(str(exc)) from exc


def prepare_call(
    correlation_id: CorrelationId, call: CallSpec, functions: FunctionTable
) -> PendingCall:
    function = functions.lookup(call.function_name)
    data = encode_function_call(function, call.args)
    request = eth_call_request(data, call.contract_address, correlation_id, call.block_number)
    return PendingCall(correlation_id=correlation_id, call=call, function=function, request=request)


def dispatch(requests: List[Dict[str, Any]], transport: BatchTransport) -> List[Dict[str, Any]]:
    """Send all requests as one batch; the batch succeeds or fails as a unit."""
    if not requests:
        return []

    logger.debug("Dispatching batch of %d eth_call requests", len(requests))
    try:
        responses = transport.batch_call(requests)
    except TransportError:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        raise TransportError(format_error(exc)) from exc

    if not isinstance(responses, list):
        raise TransportError("Transport returned a non-list batch response.")
    return responses


def _failure(exc: BaseException) -> CallResult:
    return CallResult.failure(format_error(exc), error_kind(exc))


def _execute(
    calls: Sequence[CallSpec],
    functions: FunctionTable,
    transport: BatchTransport,
    isolate_failures: bool,
) -> List[CallResult]:
    slots: List[Union[PendingCall, CallResult]] = []
    for correlation_id, call in assign_correlation_ids(calls):
        try:
            slots.append(prepare_call(correlation_id, call, functions))
        except BatchCallError as exc:
            if not isolate_failures:
                raise
            slots.append(_failure(exc))

    pending = [slot for slot in slots if isinstance(slot, PendingCall)]
    responses = dispatch([p.request for p in pending], transport)
    index: ResponseIndex = index_responses(responses, [p.correlation_id for p in pending])

    results: List[CallResult] = []
    for slot in slots:
        if isinstance(slot, CallResult):
            results.append(slot)
            continue
        try:
            response = index.take(slot.correlation_id)
            results.append(decode_result(response, slot.function))
        except BatchCallError as exc:
            if not isolate_failures:
                raise
            results.append(_failure(exc))
    return results


def execute_contract_functions(
    calls: Iterable[CallInput],
    abi: Any,
    transport: BatchTransport,
    isolate_failures: bool = False,
) -> Union[List[CallResult], CallResult]:
    """
    Execute read-only contract functions in a single JSON-RPC batch.

    Args:
        calls: call specs (or their dict form), in the order results are wanted
        abi: contract ABI as a list of descriptors or a JSON string
        transport: a :class:`BatchTransport`, usually :class:`RpcClient`
        isolate_failures: keep per-call failures in their own slot instead of
            failing the whole invocation

    Returns:
        One :class:`CallResult` per call in input order, or a single failure
        :class:`CallResult` when the invocation as a whole failed
    """
    try:
        specs = [_to_call_spec(call) for call in calls]
        functions = build_function_table(abi)
        return _execute(specs, functions, transport, isolate_failures)
    except Exception as exc:  # pylint: disable=broad-except
        failure = _failure(exc)
        logger.warning("Batch of contract calls failed: %s", failure.error)
        return failure
