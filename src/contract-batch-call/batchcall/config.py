import os
from dataclasses import dataclass

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"", "0", "false", "no", "off"}


@dataclass
class Config:
    rpc_url: str
    request_timeout: int = 10
    max_retries: int = 3
    backoff_seconds: float = 0.5
    # 0 sends every request of an invocation in one HTTP batch.
    max_batch_size: int = 0
    isolate_failures: bool = False
    log_level: str = "WARNING"


def parse_bool(value: str, name: str) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in TRUTHY:
        return True
    if normalized in FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (1/0, true/false), got '{value}'.")


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'.") from exc


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got '{raw}'.") from exc


def load_config() -> Config:
    """Load configuration from environment variables."""
    rpc_url = (os.getenv("RPC_URL") or "").strip()
    if not rpc_url:
        raise ValueError("RPC_URL is required but not set.")

    timeout = _int_env("REQUEST_TIMEOUT", "10")
    max_retries = _int_env("REQUEST_RETRIES", "3")
    backoff = _float_env("REQUEST_BACKOFF_SECONDS", "0.5")
    max_batch_size = _int_env("RPC_MAX_BATCH_SIZE", "0")
    if max_batch_size < 0:
        raise ValueError("RPC_MAX_BATCH_SIZE must be non-negative.")
    isolate = parse_bool(os.getenv("ISOLATE_FAILURES", "false"), "ISOLATE_FAILURES")
    log_level = os.getenv("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"

    return Config(
        rpc_url=rpc_url,
        request_timeout=timeout,
        max_retries=max_retries,
        backoff_seconds=backoff,
        max_batch_size=max_batch_size,
        isolate_failures=isolate,
        log_level=log_level,
    )
