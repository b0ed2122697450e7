"""
provisioning.py

Builds the ``otpauth://`` URI that authenticator apps import, and a QR chart
image URL wrapping it. Both are plain string formatting; nothing here talks to
the network.

See also:
    https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

from typing import Dict, Optional, Union
from urllib.parse import quote, urlencode

from .engine import SecretLike
from .schemas import Secret, TotpConfig
from .secret import SecretStore

QR_CHART_URL = "https://chart.googleapis.com/chart"
DEFAULT_QR_SIZE = 350


def _secret_text(secret: SecretLike) -> str:
    if isinstance(secret, Secret):
        return secret.text
    if isinstance(secret, (bytes, bytearray)):
        return SecretStore.encode(bytes(secret))
    # canonical form: uppercase, unpadded
    return SecretStore.encode(SecretStore.decode(secret))


def provisioning_uri(
    secret: SecretLike,
    label: str,
    issuer: Optional[str] = None,
    config: Optional[TotpConfig] = None,
) -> str:
    """
    Returns the provisioning URI for a TOTP secret.

    Algorithm, digits and period are only included when they differ from
    the SHA1 / 6 / 30 defaults, which some apps ignore anyway.

    :param secret: the shared secret
    :param label: account name shown in the app
    :param issuer: organization title of the entry in the app
    :param config: engine parameters the codes will be generated with
    :returns: provisioning URI
    """
    if not label:
        raise ValueError("label must not be empty")
    config = config or TotpConfig()

    url_args: Dict[str, Union[int, str]] = {"secret": _secret_text(secret)}
    path = quote(label)
    if issuer:
        path = quote(issuer) + ":" + path
        url_args["issuer"] = issuer

    defaults = TotpConfig()
    if config.hash_algorithm != defaults.hash_algorithm:
        url_args["algorithm"] = config.hash_algorithm.upper()
    if config.digits != defaults.digits:
        url_args["digits"] = config.digits
    if config.step_seconds != defaults.step_seconds:
        url_args["period"] = config.step_seconds

    return "otpauth://totp/{0}?{1}".format(path, urlencode(url_args).replace("+", "%20"))


def qrcode_image_url(
    secret: SecretLike,
    label: str,
    issuer: Optional[str] = None,
    size: int = DEFAULT_QR_SIZE,
    config: Optional[TotpConfig] = None,
) -> str:
    """Chart service URL rendering the provisioning URI as a scannable QR image."""
    if size <= 0:
        raise ValueError("size must be positive")
    query = urlencode(
        {
            "chs": f"{size}x{size}",
            "cht": "qr",
            "choe": "UTF-8",
            "chl": provisioning_uri(secret, label, issuer=issuer, config=config),
        }
    )
    return f"{QR_CHART_URL}?{query}"
