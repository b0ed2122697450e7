"""
secret.py

Shared-secret generation and RFC 4648 Base32 text encoding.

Secrets are emitted as uppercase Base32 with the ``=`` padding stripped, which
is the form authenticator apps expect in the ``secret=`` parameter of an
``otpauth://`` URI. Decoding accepts both padded and unpadded text.
"""

import base64
import binascii
import logging
import re
import secrets
from typing import Callable

from .errors import EntropySourceError, InvalidConfiguration, InvalidSecretFormat
from .schemas import Secret

logger = logging.getLogger(__name__)

DEFAULT_SECRET_LENGTH = 10  # bytes, 80 bits
MIN_SECRET_LENGTH = 10

_BASE32_BODY = re.compile(r"[A-Z2-7]+")
# Unpadded lengths (mod 8) that no whole number of bytes can produce.
_IMPOSSIBLE_REMAINDERS = {1, 3, 6}


class SecretStore:
    """Creates, encodes and decodes shared secrets."""

    def __init__(
        self,
        length: int = DEFAULT_SECRET_LENGTH,
        randbytes: Callable[[int], bytes] = secrets.token_bytes,
    ) -> None:
        """
        :param length: number of random bytes per generated secret
        :param randbytes: CSPRNG source, ``secrets.token_bytes`` unless testing
        """
        if length < MIN_SECRET_LENGTH:
            raise InvalidConfiguration(f"secrets should be at least {MIN_SECRET_LENGTH} bytes")
        self.length = length
        self._randbytes = randbytes

    def generate(self) -> Secret:
        """Draw a fresh secret from the CSPRNG. Never falls back to a weaker source."""
        try:
            raw = self._randbytes(self.length)
        except (NotImplementedError, OSError) as exc:
            logger.error("Secure randomness unavailable: %s", exc)
            raise EntropySourceError("no cryptographically secure randomness source available") from exc
        if len(raw) != self.length:
            raise EntropySourceError(f"randomness source returned {len(raw)} bytes, expected {self.length}")
        return self.from_bytes(raw)

    @staticmethod
    def encode(raw: bytes) -> str:
        if not raw:
            raise InvalidSecretFormat("cannot encode an empty secret")
        return base64.b32encode(raw).decode("ascii").rstrip("=")

    @staticmethod
    def decode(text: str) -> bytes:
        if not isinstance(text, str) or not text:
            raise InvalidSecretFormat("secret must be a non-empty string")
        if not text.isascii():
            raise InvalidSecretFormat("secret contains characters outside the Base32 alphabet")

        body = text.upper()
        stripped = body.rstrip("=")
        padding = len(body) - len(stripped)

        if not _BASE32_BODY.fullmatch(stripped):
            raise InvalidSecretFormat("secret contains characters outside the Base32 alphabet")
        if len(stripped) % 8 in _IMPOSSIBLE_REMAINDERS:
            raise InvalidSecretFormat(f"invalid Base32 length: {len(stripped)}")
        if padding and (padding >= 8 or len(body) % 8 != 0):
            raise InvalidSecretFormat(f"invalid Base32 padding length: {padding}")

        try:
            return base64.b32decode(stripped + "=" * (-len(stripped) % 8))
        except binascii.Error as exc:
            raise InvalidSecretFormat(str(exc)) from exc

    def load(self, text: str) -> Secret:
        """Parse stored Base32 text into a Secret with canonical text."""
        return self.from_bytes(self.decode(text))

    def from_bytes(self, raw: bytes) -> Secret:
        return Secret(raw=bytes(raw), text=self.encode(raw))


def random_base32(length: int = DEFAULT_SECRET_LENGTH) -> str:
    return SecretStore(length=length).generate().text
