import os
from dataclasses import dataclass
from typing import Mapping, Optional

from constants import (
    BASE_URL,
    DEFAULT_PRODUCT_GROUP,
    DEFAULT_REQUEST_LIMIT,
    DEFAULT_TIME_UNIT,
    DEFAULT_TIMEOUT,
)
from exceptions import ConfigurationError
from time_unit import TimeUnit

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class ClientConfig:
    """Settings for DocumentClient, usually read from CRPT_* environment variables."""

    base_url: str = BASE_URL
    product_group: str = DEFAULT_PRODUCT_GROUP
    time_unit: TimeUnit = TimeUnit.SECONDS
    request_limit: int = DEFAULT_REQUEST_LIMIT
    timeout: int = DEFAULT_TIMEOUT
    token_ttl: Optional[float] = None
    signer_command: Optional[str] = None
    proxy: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        env = os.environ if env is None else env
        try:
            time_unit = TimeUnit.parse(env.get("CRPT_TIME_UNIT") or DEFAULT_TIME_UNIT)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        request_limit = _int_env(env, "CRPT_REQUEST_LIMIT", DEFAULT_REQUEST_LIMIT)
        if request_limit <= 0:
            raise ConfigurationError("CRPT_REQUEST_LIMIT must be positive")

        timeout = _int_env(env, "CRPT_TIMEOUT", DEFAULT_TIMEOUT)
        if timeout <= 0:
            raise ConfigurationError("CRPT_TIMEOUT must be positive")

        return cls(
            base_url=env.get("CRPT_BASE_URL") or BASE_URL,
            product_group=env.get("CRPT_PRODUCT_GROUP") or DEFAULT_PRODUCT_GROUP,
            time_unit=time_unit,
            request_limit=request_limit,
            timeout=timeout,
            token_ttl=_float_env(env, "CRPT_TOKEN_TTL"),
            signer_command=env.get("CRPT_SIGNER_COMMAND") or None,
            proxy=(env.get("CRPT_USE_PROXY") or "").lower() in _TRUE_VALUES,
        )
