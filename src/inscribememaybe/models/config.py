"""Configuration models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from inscribememaybe.errors import ConfigurationError
from inscribememaybe.models.records import DEFAULT_GAS_LIMIT


class RetryStrategy(str, Enum):
    """How failed submissions are retried."""

    FOREVER = "forever"  # resubmit immediately, no cap
    BOUNDED = "bounded"  # resubmit immediately, give up after max_attempts
    BACKOFF = "backoff"  # exponential delay, optional cap on attempts


@dataclass
class RetryConfig:
    """Retry policy configuration."""

    strategy: RetryStrategy = RetryStrategy.FOREVER
    max_attempts: int | None = None  # required for BOUNDED
    base_delay: float = 1.0  # seconds, BACKOFF only
    max_delay: float = 60.0  # seconds, BACKOFF only

    def validate(self) -> None:
        """Raise ConfigurationError for settings no policy can be built from."""
        if self.strategy is RetryStrategy.BOUNDED and self.max_attempts is None:
            raise ConfigurationError("retry strategy 'bounded' requires max_attempts")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ConfigurationError(
                f"retry max_attempts must be at least 1, got {self.max_attempts}"
            )
        if self.base_delay < 0 or self.max_delay < 0:
            raise ConfigurationError("retry delays must not be negative")

    def build_policy(self):
        """Create the retry policy object the engine consumes."""
        self.validate()

        # Imported here so the models package stays free of engine imports.
        from inscribememaybe.engine.retry import (
            BoundedRetry,
            ExponentialBackoff,
            RetryForever,
        )

        if self.strategy is RetryStrategy.BOUNDED:
            return BoundedRetry(self.max_attempts)  # type: ignore[arg-type]
        if self.strategy is RetryStrategy.BACKOFF:
            return ExponentialBackoff(
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                max_attempts=self.max_attempts,
            )
        return RetryForever()


@dataclass
class InscriberConfig:
    """Complete configuration for a mint run."""

    # RPC
    rpc_url: str = "http://127.0.0.1:8545"
    chain_id: int | None = None  # expected chain id; None accepts whatever the RPC reports
    private_key: str = ""  # loaded from env var INSCRIBEMEMAYBE_PRIVATE_KEY

    # Mint
    transactions: int = 1
    concurrency: int = 16
    gas_limit: int = DEFAULT_GAS_LIMIT

    # Receipts
    receipt_timeout: float = 120.0  # seconds per attempt before NO_RECEIPT
    poll_interval: float = 2.0  # seconds between receipt polls

    # Retry
    retry: RetryConfig = field(default_factory=RetryConfig)

    # Storage
    db_path: str = "inscribememaybe.sqlite"

    # Logging
    log_level: str = "info"
