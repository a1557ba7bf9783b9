import logging
import time
from typing import Any, Dict, List, Optional, Protocol

import requests

from .errors import TransportError

logger = logging.getLogger(__name__)


def build_request(request_id: Any, method: str, params: List[Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}


def integer_to_quantity(value: int) -> str:
    """Encode a non-negative integer as a JSON-RPC hex quantity (``123 -> "0x7b"``)."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError("quantity must be a non-negative integer.")
    return hex(value)


def quantity_to_integer(quantity: str) -> int:
    if not isinstance(quantity, str) or not quantity.startswith("0x"):
        raise ValueError(f"Expected a 0x-prefixed hex quantity, got {quantity!r}.")
    return int(quantity, 16)


def _format_rpc_error(error_obj: Dict[str, Any]) -> str:
    code = error_obj.get("code")
    message = error_obj.get("message")
    err_data = error_obj.get("data")
    parts: list[str] = []
    if code is not None:
        parts.append(f"code {code}")
    if message:
        parts.append(str(message))
    if err_data:
        parts.append(str(err_data))
    detail = ": ".join(parts) if parts else "unknown error"
    return f"RPC error: {detail}."


class BatchTransport(Protocol):
    """Anything that can send a JSON-RPC batch and return its responses."""

    def batch_call(self, batch: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ...


class RpcClient:
    """Minimal JSON-RPC 2.0 client for EVM nodes (HTTP POST), with batch support."""

    def __init__(
        self,
        rpc_url: str,
        timeout: int = 10,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
        max_batch_size: int = 0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        url = (rpc_url or "").strip()
        if not url:
            raise ValueError("rpc_url must be a non-empty string.")

        self.rpc_url = url
        self.timeout = timeout
        self.max_retries = max(1, int(max_retries))
        self.backoff_seconds = float(backoff_seconds)
        self.max_batch_size = max(0, int(max_batch_size))
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if headers:
            self.session.headers.update(dict(headers))
        self._next_id = 1

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        if not isinstance(method, str) or not method.strip():
            raise ValueError("method must be a non-empty string.")
        if params is None:
            params = []
        if not isinstance(params, list):
            raise ValueError("params must be a list.")

        payload = build_request(self._next_id, method, params)
        self._next_id += 1

        data = self._post(payload)
        if not isinstance(data, dict):
            raise TransportError("Unexpected JSON-RPC response (non-object).")

        error_obj = data.get("error")
        if isinstance(error_obj, dict):
            raise TransportError(_format_rpc_error(error_obj))

        if "result" not in data:
            raise TransportError("Unexpected JSON-RPC response (missing result).")
        return data.get("result")

    def batch_call(self, batch: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Send ``batch`` as JSON-RPC batches and return every response.

        Requests are split into chunks of ``max_batch_size`` when it is set.
        The order of the returned responses is whatever the node sends back.
        """
        if not isinstance(batch, list):
            raise ValueError("batch must be a list.")
        if not batch:
            return []

        size = self.max_batch_size or len(batch)
        chunks = [batch[i : i + size] for i in range(0, len(batch), size)]
        logger.debug("Sending %d requests in %d batch(es)", len(batch), len(chunks))

        responses: List[Dict[str, Any]] = []
        for chunk in chunks:
            data = self._post(chunk)
            if isinstance(data, dict):
                error_obj = data.get("error")
                if isinstance(error_obj, dict):
                    raise TransportError(_format_rpc_error(error_obj))
                raise TransportError("Unexpected JSON-RPC batch response (object instead of array).")
            if not isinstance(data, list):
                raise TransportError("Unexpected JSON-RPC batch response (non-array).")
            responses.extend(data)
        return responses

    def get_block_number(self) -> int:
        result = self.call("eth_blockNumber", [])
        try:
            return quantity_to_integer(result)
        except ValueError as exc:
            raise TransportError("RPC error: eth_blockNumber returned unexpected result.") from exc

    def get_chain_id(self) -> int:
        result = self.call("eth_chainId", [])
        try:
            return quantity_to_integer(result)
        except ValueError as exc:
            raise TransportError("RPC error: eth_chainId returned unexpected result.") from exc

    def _post(self, payload: Any) -> Any:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.post(
                    self.rpc_url,
                    json=payload,
                    timeout=self.timeout,
                )
                if response.status_code in {429} or response.status_code >= 500:
                    if attempt < self.max_retries:
                        logger.warning(
                            "RPC returned HTTP %s, retrying (%d/%d)",
                            response.status_code,
                            attempt,
                            self.max_retries,
                        )
                        time.sleep(self.backoff_seconds * attempt)
                        continue

                response.raise_for_status()
                return response.json()
            except requests.RequestException as exc:
                last_error = exc
                if attempt < self.max_retries:
                    logger.warning("RPC request failed: %s, retrying (%d/%d)", exc, attempt, self.max_retries)
                    time.sleep(self.backoff_seconds * attempt)
                    continue
                raise TransportError(f"RPC request failed: {exc}") from exc
            except ValueError as exc:
                last_error = exc
                if attempt < self.max_retries:
                    time.sleep(self.backoff_seconds * attempt)
                    continue
                raise TransportError("Failed to parse JSON-RPC response.") from exc

        if last_error:
            raise TransportError(str(last_error)) from last_error
        raise TransportError("RPC request failed without raising an exception.")
