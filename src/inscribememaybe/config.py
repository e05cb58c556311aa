"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from inscribememaybe.errors import ConfigurationError
from inscribememaybe.models.config import InscriberConfig, RetryConfig, RetryStrategy


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "INSCRIBEMEMAYBE_",
) -> InscriberConfig:
    """Load configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (INSCRIBEMEMAYBE_PRIVATE_KEY, etc.)
        2. TOML config file
        3. Defaults from InscriberConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = InscriberConfig()

    # ── RPC section ────────────────────────────────────────
    rpc = raw.get("rpc", {})
    if v := rpc.get("url"):
        cfg.rpc_url = str(v)
    if v := rpc.get("chain_id"):
        cfg.chain_id = int(v)
    if v := rpc.get("private_key"):
        cfg.private_key = str(v)
    if v := rpc.get("receipt_timeout"):
        cfg.receipt_timeout = float(v)
    if v := rpc.get("poll_interval"):
        cfg.poll_interval = float(v)

    # ── Mint section ───────────────────────────────────────
    mint = raw.get("mint", {})
    if v := mint.get("transactions"):
        cfg.transactions = int(v)
    if v := mint.get("concurrency"):
        cfg.concurrency = int(v)
    if v := mint.get("gas_limit"):
        cfg.gas_limit = int(v)

    # ── Retry section ──────────────────────────────────────
    retry_raw = raw.get("retry", {})
    strategy = retry_raw.get("strategy", "forever")
    try:
        strategy = RetryStrategy(str(strategy).lower())
    except ValueError:
        choices = ", ".join(s.value for s in RetryStrategy)
        raise ConfigurationError(
            f"unknown retry strategy '{strategy}' (expected one of: {choices})"
        ) from None
    cfg.retry = RetryConfig(
        strategy=strategy,
        max_attempts=retry_raw.get("max_attempts"),
        base_delay=float(retry_raw.get("base_delay", 1.0)),
        max_delay=float(retry_raw.get("max_delay", 60.0)),
    )
    cfg.retry.validate()

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Logging section ────────────────────────────────────
    logging_raw = raw.get("logging", {})
    if v := logging_raw.get("level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if key := os.environ.get(f"{env_prefix}PRIVATE_KEY"):
        cfg.private_key = key
    if url := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = url
    if chain := os.environ.get(f"{env_prefix}CHAIN_ID"):
        cfg.chain_id = int(chain)
    if db := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db
    if conc := os.environ.get(f"{env_prefix}CONCURRENCY"):
        cfg.concurrency = int(conc)

    # Expand ~ in paths
    cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg
