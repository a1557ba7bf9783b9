import pytest

from batchcall.config import load_config, parse_bool

ENV_VARS = [
    "RPC_URL",
    "REQUEST_TIMEOUT",
    "REQUEST_RETRIES",
    "REQUEST_BACKOFF_SECONDS",
    "RPC_MAX_BATCH_SIZE",
    "ISOLATE_FAILURES",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_requires_rpc_url():
    with pytest.raises(ValueError, match="RPC_URL"):
        load_config()


def test_defaults(monkeypatch):
    monkeypatch.setenv("RPC_URL", " http://localhost:8545 ")

    config = load_config()

    assert config.rpc_url == "http://localhost:8545"
    assert config.request_timeout == 10
    assert config.max_retries == 3
    assert config.backoff_seconds == 0.5
    assert config.max_batch_size == 0
    assert config.isolate_failures is False
    assert config.log_level == "WARNING"


def test_overrides(monkeypatch):
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("REQUEST_TIMEOUT", "30")
    monkeypatch.setenv("REQUEST_RETRIES", "5")
    monkeypatch.setenv("REQUEST_BACKOFF_SECONDS", "0.1")
    monkeypatch.setenv("RPC_MAX_BATCH_SIZE", "100")
    monkeypatch.setenv("ISOLATE_FAILURES", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config()

    assert (config.request_timeout, config.max_retries, config.backoff_seconds) == (30, 5, 0.1)
    assert config.max_batch_size == 100
    assert config.isolate_failures is True
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value",
    [("REQUEST_TIMEOUT", "soon"), ("RPC_MAX_BATCH_SIZE", "-1"), ("ISOLATE_FAILURES", "maybe")],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv("RPC_URL", "http://localhost:8545")
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        load_config()


def test_parse_bool():
    assert parse_bool("TRUE", "X") is True
    assert parse_bool("0", "X") is False
