"""
Lazily fetched, shared bearer token.

The first get_token() call runs the challenge/sign/exchange round trip;
every other caller, concurrent or later, gets the same token without any
network I/O until it is invalidated or its TTL runs out.
"""

import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Optional

from exceptions import ConfigurationError
from models import AuthChallenge
from signer import Signer

logger = logging.getLogger(__name__)


class TokenCache:
    """Owns one auth token and fetches it at most once at a time.

    Concurrent callers that miss the cache share a single in-flight fetch:
    the first one creates a Future and runs the exchange, the rest block on
    that Future and receive its result or its exception.

    Args:
        fetch_challenge: Returns the AuthChallenge (uuid + data to sign).
        exchange_token: Takes (uuid, signature) and returns the token string.
        signer: Signs the challenge data.
        ttl_seconds: Lifetime of a fetched token; None keeps it until invalidate().
        clock: Monotonic clock in seconds, used for the TTL.
    """

    def __init__(
            self,
            fetch_challenge: Callable[[], AuthChallenge],
            exchange_token: Callable[[str, str], str],
            signer: Signer,
            ttl_seconds: Optional[float] = None,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ConfigurationError("ttl_seconds must be positive or None")
        self._fetch_challenge = fetch_challenge
        self._exchange_token = exchange_token
        self._signer = signer
        self._ttl = ttl_seconds
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at: Optional[float] = None
        self._pending: Optional[Future] = None
        self._lock = threading.Lock()

    def _valid(self) -> Optional[str]:
        token, expires_at = self._token, self._expires_at
        if token is None:
            return None
        if expires_at is not None and self._clock() >= expires_at:
            return None
        return token

    def get_token(self) -> str:
        token = self._valid()
        if token is not None:
            return token

        with self._lock:
            token = self._valid()
            if token is not None:
                return token
            future = self._pending
            owner = future is None
            if owner:
                future = self._pending = Future()

        if not owner:
            return future.result()

        try:
            token = self._fetch()
        except BaseException as e:
            with self._lock:
                self._pending = None
            future.set_exception(e)
            raise

        with self._lock:
            self._token = token
            self._expires_at = None if self._ttl is None else self._clock() + self._ttl
            self._pending = None
        future.set_result(token)
        return token

    def _fetch(self) -> str:
        logger.info("Requesting auth challenge")
        challenge = self._fetch_challenge()
        signature = self._signer.sign(challenge.data)
        token = self._exchange_token(challenge.uuid, signature)
        logger.info("Auth token obtained for challenge %s", challenge.uuid)
        return token

    def invalidate(self) -> None:
        """Drops the cached token; the next get_token() fetches a new one."""
        with self._lock:
            self._token = None
            self._expires_at = None
        logger.debug("Auth token invalidated")
