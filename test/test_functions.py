import json

import pytest

from batchcall.errors import AbiError, AmbiguousFunctionError, UnknownFunctionError
from batchcall.functions import build_function_table

OVERLOADED_ABI = [
    {
        "type": "function",
        "name": "safeTransferFrom",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "tokenId", "type": "uint256"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "safeTransferFrom",
        "inputs": [
            {"name": "from", "type": "address"},
            {"name": "to", "type": "address"},
            {"name": "tokenId", "type": "uint256"},
            {"name": "data", "type": "bytes"},
        ],
        "outputs": [],
    },
]


def test_function_table_indexes_functions_only(erc20_abi):
    table = build_function_table(erc20_abi)

    assert len(table) == 5
    assert "Transfer" not in table
    balance_of = table.lookup("balanceOf")
    assert balance_of.inputs == ("address",)
    assert balance_of.outputs == ("uint256",)
    assert balance_of.selector.hex() == "70a08231"
    assert balance_of.signature == "balanceOf(address)"
    assert balance_of.state_mutability == "view"


def test_function_table_accepts_json_string(erc20_abi):
    table = build_function_table(json.dumps(erc20_abi))
    assert table.lookup("totalSupply").selector.hex() == "18160ddd"


def test_entry_without_type_is_a_function():
    table = build_function_table([{"name": "owner", "inputs": [], "outputs": [{"type": "address"}]}])
    assert table.lookup("owner").outputs == ("address",)


def test_tuple_components_are_collapsed():
    abi = [
        {
            "type": "function",
            "name": "slot0",
            "inputs": [
                {
                    "name": "key",
                    "type": "tuple",
                    "components": [
                        {"name": "currency0", "type": "address"},
                        {"name": "fee", "type": "uint24"},
                    ],
                }
            ],
            "outputs": [{"name": "", "type": "uint160"}],
        }
    ]
    function = build_function_table(abi).lookup("slot0")
    assert function.inputs == ("(address,uint24)",)
    assert function.signature == "slot0((address,uint24))"


def test_unknown_function(erc20_abi):
    with pytest.raises(UnknownFunctionError, match="allowance"):
        build_function_table(erc20_abi).lookup("allowance")


def test_overloaded_name_requires_signature():
    table = build_function_table(OVERLOADED_ABI)

    with pytest.raises(AmbiguousFunctionError) as excinfo:
        table.lookup("safeTransferFrom")
    assert "safeTransferFrom(address,address,uint256,bytes)" in str(excinfo.value)
    assert excinfo.value.kind == "ambiguous_function"

    four_args = table.lookup("safeTransferFrom(address, address, uint256, bytes)")
    assert four_args.inputs[-1] == "bytes"
    assert table.lookup("safeTransferFrom(address,address,uint256)").selector.hex() == "42842e0e"


def test_exact_duplicate_declaration_is_rejected():
    with pytest.raises(AbiError, match="more than once"):
        build_function_table(OVERLOADED_ABI + [OVERLOADED_ABI[0]])


@pytest.mark.parametrize(
    "abi",
    [
        "not json",
        {"name": "balanceOf"},
        [{"type": "function", "inputs": []}],
        [{"type": "function", "name": "f", "inputs": "address"}],
        [{"type": "function", "name": "f", "inputs": [{"name": "x"}]}],
        ["balanceOf"],
    ],
)
def test_malformed_abi(abi):
    with pytest.raises(AbiError):
        build_function_table(abi)


@pytest.mark.parametrize("typ", ["uint256[", "uint7", "bytes33", "tuple"])
def test_invalid_parameter_type(typ):
    abi = [{"type": "function", "name": "f", "inputs": [{"name": "x", "type": typ}], "outputs": []}]

    with pytest.raises(AbiError, match="invalid type"):
        build_function_table(abi)
