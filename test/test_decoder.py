import pytest
from eth_abi import encode

from batchcall.decoder import decode_result
from batchcall.errors import DecodingError
from batchcall.functions import build_function_table
from fakes import RESERVES


@pytest.fixture
def table(erc20_abi):
    return build_function_table(erc20_abi)


def _ok(data: bytes, i: int = 0):
    return {"id": i, "result": "0x" + data.hex()}


def test_single_output_is_unwrapped(table):
    result = decode_result(_ok(encode(["uint256"], [42])), table.lookup("totalSupply"))
    assert result.ok
    assert result.value == 42


def test_multiple_outputs_are_a_tuple(table):
    data = encode(["uint112", "uint112", "uint32"], list(RESERVES))
    result = decode_result(_ok(data), table.lookup("getReserves"))
    assert result.value == RESERVES


def test_string_output(table):
    result = decode_result(_ok(encode(["string"], ["DAI"])), table.lookup("symbol"))
    assert result.value == "DAI"


def test_no_outputs_decode_to_empty_tuple():
    table = build_function_table([{"type": "function", "name": "poke", "inputs": [], "outputs": []}])
    result = decode_result({"id": 0, "result": "0x"}, table.lookup("poke"))
    assert result.ok
    assert result.value == ()


def test_node_error_is_a_call_failure(table):
    response = {"id": 0, "error": {"code": -32000, "message": "execution reverted"}}
    result = decode_result(response, table.lookup("totalSupply"))

    assert not result.ok
    assert result.error == "(-32000) execution reverted"
    assert result.kind == "rpc"


@pytest.mark.parametrize(
    "response",
    [
        {"id": 0, "result": "0x"},
        {"id": 0, "result": "0x1234"},
        {"id": 0, "result": "0xzz"},
        {"id": 0, "result": 42},
        {"id": 0},
    ],
)
def test_malformed_results_raise(table, response):
    with pytest.raises(DecodingError):
        decode_result(response, table.lookup("totalSupply"))
