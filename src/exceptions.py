"""
Exception hierarchy for the document-submission client.

Every failure the client raises derives from CrptError so callers can catch
the whole family at one seam, while the concrete type tells them whether the
problem is local configuration, the remote service, the payload, or a
cancelled wait.
"""

from typing import Optional


class CrptError(Exception):
    """Base class for all client errors."""


class ConfigurationError(CrptError, ValueError):
    """Raised for invalid construction parameters, before any I/O happens."""


class TransportError(CrptError):
    """
    Raised when a remote call does not answer with HTTP 200.

    status_code is None when the request never produced a response
    (connection refused, timeout, TLS failure).
    """

    def __init__(self, status_code: Optional[int], body: str, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        where = f" ({url})" if url else ""
        if status_code is None:
            message = f"Request failed{where}: {body}"
        else:
            message = f"API request failed with status {status_code}{where}: {body}"
        super().__init__(message)


class SerializationError(CrptError):
    """Raised when a payload cannot be encoded or a response cannot be decoded."""


class InterruptedWait(CrptError):
    """Raised when a blocking rate-limit wait is cancelled by the caller."""


class SigningError(CrptError):
    """Raised when the external signer cannot produce a signature."""
