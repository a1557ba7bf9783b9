import pytest

from fakes import ERC20_ABI, FakeTransport


@pytest.fixture
def erc20_abi():
    return [dict(entry) for entry in ERC20_ABI]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
