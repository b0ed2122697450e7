"""
errors.py

Exceptions raised by the TOTP engine.
"""


class TotpError(Exception):
    """Base class for every error raised by totp_auth."""


class EntropySourceError(TotpError, RuntimeError):
    """The platform could not supply cryptographically secure randomness."""


class InvalidSecretFormat(TotpError, ValueError):
    """Secret text is not valid RFC 4648 Base32."""


class MalformedCode(TotpError, ValueError):
    """Candidate code is not a clean numeric string of the expected length."""


class InvalidConfiguration(TotpError, ValueError):
    """Algorithm parameters (hash, step, digits, window) are out of range."""
