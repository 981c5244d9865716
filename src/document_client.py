import logging
import threading
from typing import Any, Optional, Union

from config import ClientConfig
from constants import DEFAULT_PRODUCT_GROUP, DOCUMENT_FORMAT, DOCUMENT_TYPE
from crpt_api_client import CrptAPIClient
from exceptions import ConfigurationError
from models import Document
from rate_limiter import RateLimiter
from signer import CommandSigner, Signer
from time_unit import TimeUnit
from token_cache import TokenCache
from utils import _canonical_json, _to_base64

logger = logging.getLogger(__name__)


class DocumentClient:
    """Submits introduce-goods documents, rate limited and with a shared token.

    Safe to share between threads: the limiter and the token cache each
    guard their own state, and the transport session pools connections.

    Args:
        time_unit: Window length of the rate limiter.
        request_limit: Submissions allowed per window.
        api_client: Transport; a default CrptAPIClient is created when omitted.
        signer: Signs the auth challenge. Required unless token_cache is given.
        token_cache: Prebuilt cache, mainly for tests.
        product_group: Value of the `pg` query parameter.
        token_ttl: Seconds a token is reused; None means for the client's life.
    """

    def __init__(
            self,
            time_unit: Union[TimeUnit, str],
            request_limit: int,
            api_client: Optional[CrptAPIClient] = None,
            signer: Optional[Signer] = None,
            token_cache: Optional[TokenCache] = None,
            product_group: str = DEFAULT_PRODUCT_GROUP,
            token_ttl: Optional[float] = None,
    ) -> None:
        self.rate_limiter = RateLimiter(time_unit, request_limit)
        if token_cache is None and signer is None:
            raise ConfigurationError("A signer is required to obtain auth tokens")

        self.api_client = api_client or CrptAPIClient()
        self.token_cache = token_cache or TokenCache(
            fetch_challenge=self.api_client.get_auth_challenge,
            exchange_token=self.api_client.get_auth_token,
            signer=signer,
            ttl_seconds=token_ttl,
        )
        self.product_group = product_group

    @classmethod
    def from_config(cls, config: ClientConfig, signer: Optional[Signer] = None) -> "DocumentClient":
        if signer is None:
            if not config.signer_command:
                raise ConfigurationError("Set CRPT_SIGNER_COMMAND or pass a signer")
            signer = CommandSigner(config.signer_command)
        return cls(
            time_unit=config.time_unit,
            request_limit=config.request_limit,
            api_client=CrptAPIClient(base_url=config.base_url, timeout=config.timeout,
                                     proxy=config.proxy),
            signer=signer,
            product_group=config.product_group,
            token_ttl=config.token_ttl,
        )

    def __enter__(self) -> "DocumentClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @staticmethod
    def build_envelope(document: Document, signature: str) -> str:
        """Encodes the document and wraps it with its signature, as JSON text."""
        product_document = _to_base64(_canonical_json(document.to_dict()))
        return _canonical_json({
            "type": DOCUMENT_TYPE,
            "document_format": DOCUMENT_FORMAT,
            "product_document": product_document,
            "signature": signature,
        })

    def create_document(
            self,
            document: Document,
            signature: str,
            cancel: Optional[threading.Event] = None,
    ) -> Any:
        """Submit one document.

        Args:
            document: The document to introduce.
            signature: Detached signature of the document, produced by the caller.
            cancel: Optional event that aborts a pending rate-limit wait.

        Returns:
            The parsed server response, or None for an empty body.

        Raises:
            TransportError: Any endpoint answered with something other than 200.
            SerializationError: The payload or a response could not be (de)coded.
            InterruptedWait: `cancel` was set while waiting for a slot.
        """
        token = self.token_cache.get_token()
        envelope = self.build_envelope(document, signature)
        self.rate_limiter.acquire(cancel)
        logger.debug("Submitting document with %d products to pg=%s",
                     len(document.products), self.product_group)
        return self.api_client.create_document(envelope, token, self.product_group)

    def close(self) -> None:
        self.api_client.close()
