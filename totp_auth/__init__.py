"""
__init__.py

Makes totp_auth a package.
Exposes the TOTP engine, secret handling and the Flask app factory for easy imports.
"""

from .app import create_app as create_app
from .engine import TotpEngine as TotpEngine
from .engine import current_codes as current_codes
from .engine import generate_secret as generate_secret
from .engine import is_valid as is_valid
from .errors import EntropySourceError as EntropySourceError
from .errors import InvalidConfiguration as InvalidConfiguration
from .errors import InvalidSecretFormat as InvalidSecretFormat
from .errors import MalformedCode as MalformedCode
from .errors import TotpError as TotpError
from .provisioning import provisioning_uri as provisioning_uri
from .provisioning import qrcode_image_url as qrcode_image_url
from .schemas import CurrentCodes as CurrentCodes
from .schemas import Secret as Secret
from .schemas import TotpConfig as TotpConfig
from .secret import SecretStore as SecretStore
from .secret import random_base32 as random_base32
