"""
engine.py

HOTP (RFC 4226) and TOTP (RFC 6238) code derivation and validation.

The engine holds nothing but the decoded secret and a frozen TotpConfig, so one
instance can be shared between threads. Time is read from ``time.time()`` only
when the caller does not pass ``now``.
"""

import hmac
import logging
import re
import time
from datetime import datetime
from typing import Optional, Union

from .errors import MalformedCode
from .schemas import CurrentCodes, Secret, TotpConfig
from .secret import DEFAULT_SECRET_LENGTH, SecretStore

logger = logging.getLogger(__name__)

_COUNTER_MASK = 0xFFFF_FFFF_FFFF_FFFF
_ASCII_DIGITS = re.compile(r"[0-9]+")

SecretLike = Union[Secret, bytes, str]
Timestamp = Union[int, float, datetime]


def pack_counter(counter: int) -> bytes:
    """8-byte big-endian counter; negatives wrap to their 64-bit two's complement."""
    return (counter & _COUNTER_MASK).to_bytes(8, "big")


def _as_secret(secret: Optional[SecretLike]) -> Secret:
    if secret is None:
        return SecretStore().generate()
    if isinstance(secret, Secret):
        return secret
    if isinstance(secret, (bytes, bytearray)):
        return SecretStore().from_bytes(bytes(secret))
    return SecretStore().load(secret)


def _timestamp(now: Optional[Timestamp]) -> float:
    if now is None:
        return time.time()
    if isinstance(now, datetime):
        return now.timestamp()
    return now


class TotpEngine:
    """Derives and validates one-time codes for a single secret."""

    def __init__(self, secret: Optional[SecretLike] = None, config: Optional[TotpConfig] = None) -> None:
        """
        :param secret: a Secret, raw key bytes, or Base32 secret text; a fresh
            secret is generated when omitted
        :param config: hash algorithm, step, digits and window; SHA1/30s/6 digits/±1 by default
        """
        self._secret = _as_secret(secret)
        self._key = self._secret.raw
        self.config = config or TotpConfig()

    @property
    def secret(self) -> Secret:
        return self._secret

    def hotp(self, counter: int) -> str:
        """
        Generates the HOTP code for the given counter.

        :param counter: HMAC counter, usually the current time step
        :returns: zero-padded code of ``config.digits`` characters
        """
        mac = hmac.new(self._key, pack_counter(counter), self.config.hash_algorithm).digest()
        offset = mac[-1] & 0x0F
        binary = (
            (mac[offset] & 0x7F) << 24
            | mac[offset + 1] << 16
            | mac[offset + 2] << 8
            | mac[offset + 3]
        )
        digits = self.config.digits
        return str(binary % 10**digits).zfill(digits)

    def counter_at(self, now: Optional[Timestamp] = None) -> int:
        return int(_timestamp(now) // self.config.step_seconds)

    def normalize_code(self, candidate: Union[str, int]) -> str:
        """
        Returns the candidate as a zero-padded code string.

        Strings must be exactly ``digits`` ASCII digits (surrounding whitespace
        is ignored); integers must fall in ``[0, 10**digits)``. Anything else
        raises MalformedCode.
        """
        digits = self.config.digits
        if isinstance(candidate, bool):
            raise MalformedCode("code must be a string or an integer")
        if isinstance(candidate, int):
            if not 0 <= candidate < 10**digits:
                raise MalformedCode(f"code is out of range for {digits} digits")
            return str(candidate).zfill(digits)
        if not isinstance(candidate, str):
            raise MalformedCode("code must be a string or an integer")

        code = candidate.strip()
        if not _ASCII_DIGITS.fullmatch(code):
            raise MalformedCode("code must contain only digits")
        if len(code) != digits:
            raise MalformedCode(f"code must be exactly {digits} digits")
        return code

    def is_valid(self, candidate: Union[str, int], now: Optional[Timestamp] = None) -> bool:
        """
        Checks the candidate against every step in ``[-window, +window]`` around now.

        Does not protect against replay inside the window; tracking the last
        accepted counter is up to the caller.
        """
        code = self.normalize_code(candidate)
        base = self.counter_at(now)
        window = self.config.window

        matched = False
        for step in range(-window, window + 1):
            # every step is compared so timing does not reveal which one matched
            matched |= hmac.compare_digest(code, self.hotp(base + step))

        logger.debug("TOTP validation at counter %d: %s", base, "accepted" if matched else "rejected")
        return matched

    verify = is_valid

    def current_codes(self, now: Optional[Timestamp] = None) -> CurrentCodes:
        base = self.counter_at(now)
        return CurrentCodes(
            counter=base,
            previous=self.hotp(base - 1),
            current=self.hotp(base),
            next=self.hotp(base + 1),
        )


# ---------------------------
# Module-level interface
# ---------------------------
def generate_secret(length: int = DEFAULT_SECRET_LENGTH) -> Secret:
    return SecretStore(length=length).generate()


def is_valid(
    secret: SecretLike,
    candidate_code: Union[str, int],
    now: Optional[Timestamp] = None,
    config: Optional[TotpConfig] = None,
) -> bool:
    return TotpEngine(secret, config).is_valid(candidate_code, now)


def current_codes(
    secret: SecretLike,
    now: Optional[Timestamp] = None,
    config: Optional[TotpConfig] = None,
) -> CurrentCodes:
    return TotpEngine(secret, config).current_codes(now)
