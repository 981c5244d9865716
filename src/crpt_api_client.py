import logging
import os
from typing import Any, Dict, Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter

from constants import (
    AUTH_CHALLENGE_ENDPOINT,
    AUTH_TOKEN_ENDPOINT,
    BASE_URL,
    CREATE_DOCUMENT_ENDPOINT,
    DEFAULT_TIMEOUT,
    USER_AGENT,
)
from exceptions import ConfigurationError, SerializationError, TransportError
from models import AuthChallenge

logger = logging.getLogger(__name__)


class CrptAPIClient:
    """HTTP transport for the CRPT true-API v3 document endpoints.

    Wraps a pooled requests.Session and turns every answer that is not
    HTTP 200 into a TransportError carrying the status and body. Nothing is
    retried here; the adapter is mounted with max_retries=0.

    Args:
        base_url: API root, e.g. 'https://ismp.crpt.ru/api/v3'.
        timeout: Request timeout in seconds.
        pool_size: Connections kept per host.
        proxy: Route through HTTP_PROXY/HTTPS_PROXY from the environment.
            Certificate verification is turned off in that mode.

    Usage:
        with CrptAPIClient() as client:
            challenge = client.get_auth_challenge()
    """

    def __init__(
            self,
            base_url: str = BASE_URL,
            timeout: int = DEFAULT_TIMEOUT,
            pool_size: int = 10,
            proxy: bool = False,
    ):
        if timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {timeout!r}")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.proxy = proxy

        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': USER_AGENT,
        })
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        if self.proxy:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            self.session.proxies = {
                "http": os.getenv("HTTP_PROXY"),
                "https": os.getenv("HTTPS_PROXY"),
            }

    def __enter__(self) -> "CrptAPIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
            self,
            method: str,
            endpoint: str,
            params: Optional[Dict[str, Any]] = None,
            json: Optional[Dict[str, Any]] = None,
            data: Optional[str] = None,
            headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method (e.g., 'GET', 'POST').
            endpoint: API endpoint path.
            params: Query parameters.
            json: JSON payload, encoded by requests.
            data: Pre-encoded body, sent as UTF-8.
            headers: Extra headers for this request.

        Returns:
            Parsed JSON response, or None for an empty body.

        Raises:
            TransportError: For non-200 answers and network failures.
            SerializationError: If the body is not valid JSON.
        """
        url = f'{self.base_url}/{endpoint.lstrip("/")}'
        logger.debug('Making %s request to %s with params=%s', method, url, params)

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json,
                data=data.encode('utf-8') if data is not None else None,
                headers=headers,
                timeout=self.timeout,
                verify=not self.proxy,
            )
        except requests.exceptions.RequestException as e:
            logger.error('Request failed: %s', e)
            raise TransportError(None, str(e), url=url) from e

        if response.status_code != 200:
            logger.error('HTTP error: %s - %s', response.status_code, response.text)
            raise TransportError(response.status_code, response.text, url=url)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise SerializationError(f'Malformed JSON from {url}: {e}') from e

    # --- Authentication Endpoints ---

    def get_auth_challenge(self) -> AuthChallenge:
        """Get a one-time challenge to sign.

        Returns:
            AuthChallenge with the correlation uuid and the data to sign.
        """
        return AuthChallenge.from_dict(self._request('GET', AUTH_CHALLENGE_ENDPOINT))

    def get_auth_token(self, uuid: str, signature: str) -> str:
        """Exchange a signed challenge for a bearer token.

        Args:
            uuid: Correlation id from the challenge.
            signature: Base64 signature over the challenge data.

        Returns:
            The token string.
        """
        body = self._request('POST', AUTH_TOKEN_ENDPOINT, json={'uuid': uuid, 'data': signature})
        if not isinstance(body, dict) or not body.get('token'):
            raise SerializationError('Auth token response has no token')
        return str(body['token'])

    # --- Documents Endpoints ---

    def create_document(self, envelope_json: str, token: str, product_group: str) -> Any:
        """Submit an encoded document envelope.

        Args:
            envelope_json: The envelope, already serialized to JSON.
            token: Bearer token.
            product_group: Product group, sent as the `pg` query parameter.

        Returns:
            Parsed server response or None.
        """
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {token}',
        }
        return self._request('POST', CREATE_DOCUMENT_ENDPOINT, params={'pg': product_group},
                             data=envelope_json, headers=headers)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
