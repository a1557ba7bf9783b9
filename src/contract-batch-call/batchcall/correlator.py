from typing import Any, Dict, Iterable, Mapping

from .errors import CorrelationError, MissingCorrelationError
from .models import CorrelationId


class ResponseIndex:
    """Responses of one batch keyed by correlation id."""

    def __init__(self, responses: Dict[CorrelationId, Dict[str, Any]]) -> None:
        self._responses = responses

    def take(self, correlation_id: CorrelationId) -> Dict[str, Any]:
        """Return the response for ``correlation_id``, failing if the node never answered it."""
        response = self._responses.get(correlation_id)
        if response is None:
            raise MissingCorrelationError(correlation_id)
        return response

    def __len__(self) -> int:
        return len(self._responses)


def index_responses(
    responses: Iterable[Mapping[str, Any]],
    expected_ids: Iterable[CorrelationId],
) -> ResponseIndex:
    """
    Index batch responses by id, independent of arrival order.

    Raises:
        CorrelationError: a response has no id, repeats an id, or answers
            an id that was never requested
    """
    expected = set(expected_ids)
    indexed: Dict[CorrelationId, Dict[str, Any]] = {}

    for response in responses:
        if not isinstance(response, Mapping) or "id" not in response:
            raise CorrelationError("Batch response entry has no id.")
        correlation_id = response["id"]
        if correlation_id not in expected:
            raise CorrelationError(f"Response id {correlation_id!r} does not match any request.")
        if correlation_id in indexed:
            raise CorrelationError(f"Response id {correlation_id!r} was returned more than once.")
        indexed[CorrelationId(correlation_id)] = dict(response)

    return ResponseIndex(indexed)
