"""Ledger gateway configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, cast

from .env import optional_env_var, optional_float_env, optional_int_env, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy, ShouldCacheHook

LEDGER_TIMEOUT_SECONDS = 10.0
CACHE_BACKENDS = ("memory", "sqlite")


@dataclass(frozen=True)
class LedgerConfig:
    """Holds ledger gateway configuration values.

    ``call_timeout_seconds`` bounds a whole ledger call, retries and rate-limit waits
    included, while the resilience timeout applies to each individual HTTP exchange.
    """

    base_url: str
    resilience: ResilienceConfig
    api_key: str | None = None
    call_timeout_seconds: float = LEDGER_TIMEOUT_SECONDS


def _cache_backend() -> Literal["memory", "sqlite"]:
    backend = (optional_env_var("CHAINMARK_LEDGER_CACHE_BACKEND") or "memory").lower()
    if backend not in CACHE_BACKENDS:
        raise ConfigurationError(
            f"CHAINMARK_LEDGER_CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, "
            f"got {backend!r}"
        )
    return cast("Literal['memory', 'sqlite']", backend)


def get_ledger_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> LedgerConfig:
    values = require_env_vars(("CHAINMARK_LEDGER_URL",))
    base_url = values["CHAINMARK_LEDGER_URL"].strip().rstrip("/")
    api_key = optional_env_var("CHAINMARK_LEDGER_API_KEY")
    timeout = optional_float_env("CHAINMARK_LEDGER_TIMEOUT") or LEDGER_TIMEOUT_SECONDS
    retries = optional_int_env("CHAINMARK_LEDGER_MAX_RETRIES") or 0
    rate = optional_float_env("CHAINMARK_LEDGER_RATE_LIMIT")
    cache_ttl = optional_float_env("CHAINMARK_LEDGER_CACHE_TTL")

    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return LedgerConfig(
        base_url=base_url,
        api_key=api_key,
        call_timeout_seconds=timeout,
        resilience=resilience
        or ResilienceConfig(
            name="ledger",
            base_url=base_url,
            timeout_seconds=timeout,
            retry=RetryPolicy(total=retries),
            ratelimit=RateLimit(max_calls=1, per_seconds=1.0 / rate) if rate else None,
            cache=CacheConfig(
                backend=_cache_backend(),
                default_ttl_seconds=cache_ttl,
                should_cache=cache_predicate,
            )
            if cache_ttl
            else None,
            default_headers=headers,
        ),
    )
