import pytest

from batchcall.correlator import index_responses
from batchcall.errors import CorrelationError, MissingCorrelationError
from batchcall.models import CorrelationId


def _response(i: int):
    return {"jsonrpc": "2.0", "id": i, "result": "0x" + f"{i:064x}"}


def test_index_is_order_independent():
    index = index_responses([_response(2), _response(0), _response(1)], [0, 1, 2])

    assert len(index) == 3
    for i in range(3):
        assert index.take(CorrelationId(i))["id"] == i


def test_missing_response_fails_on_take():
    index = index_responses([_response(0)], [0, 1])

    with pytest.raises(MissingCorrelationError) as excinfo:
        index.take(CorrelationId(1))
    assert excinfo.value.correlation_id == 1
    assert excinfo.value.kind == "correlation"


@pytest.mark.parametrize(
    "responses",
    [
        [_response(0), _response(0)],
        [_response(0), _response(7)],
        [{"result": "0x"}],
        ["0x00"],
    ],
)
def test_malformed_batches(responses):
    with pytest.raises(CorrelationError):
        index_responses(responses, [0, 1])
