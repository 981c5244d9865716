import logging
import shlex
import subprocess
from typing import Protocol, Sequence, Union

from exceptions import ConfigurationError, SigningError

logger = logging.getLogger(__name__)


class Signer(Protocol):
    """Produces a base64 detached signature over challenge data."""

    def sign(self, data: str) -> str:
        ...


class CommandSigner:
    """Signs by piping data through an external signing program.

    The program gets the challenge data on stdin and must print the base64
    signature on stdout, e.g. a wrapper around CryptoPro `cryptcp` or
    `openssl cms -sign`. The signing algorithm is entirely the program's
    business.

    Args:
        command: Command line as a string (split with shlex) or argv list.
        timeout: Seconds to wait for the program.
    """

    def __init__(self, command: Union[str, Sequence[str]], timeout: float = 60.0) -> None:
        argv = shlex.split(command) if isinstance(command, str) else list(command)
        if not argv:
            raise ConfigurationError("Signer command must not be empty")
        self.argv = argv
        self.timeout = timeout

    def sign(self, data: str) -> str:
        logger.debug("Signing %d characters with %s", len(data), self.argv[0])
        try:
            result = subprocess.run(
                self.argv,
                input=data,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise SigningError(f"Signer {self.argv[0]!r} could not run: {e}") from e
        if result.returncode != 0:
            raise SigningError(
                f"Signer {self.argv[0]!r} exited with {result.returncode}: {result.stderr.strip()}"
            )
        signature = result.stdout.strip()
        if not signature:
            raise SigningError(f"Signer {self.argv[0]!r} produced no signature")
        return signature
