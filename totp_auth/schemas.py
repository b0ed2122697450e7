import hashlib
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from .errors import InvalidConfiguration

# RFC 4226 dynamic truncation reads up to mac[15 + 3]; a 20-byte digest is the SHA1 floor.
MIN_DIGEST_SIZE = 20


class Secret(BaseModel):
    """A shared secret in both raw and Base32 form. Never printed in full."""

    model_config = ConfigDict(frozen=True)

    raw: bytes = Field(..., min_length=1, repr=False)
    text: str = Field(..., min_length=1, repr=False)

    def __str__(self) -> str:
        return self.text


class TotpConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash_algorithm: str = "sha1"
    step_seconds: int = Field(30, gt=0)
    digits: int = Field(6, ge=6, le=10)
    window: int = Field(1, ge=0, le=10)

    @field_validator("hash_algorithm")
    @classmethod
    def check_hash_algorithm(cls, value: str) -> str:
        name = value.lower().replace("-", "")
        if name not in hashlib.algorithms_available:
            raise ValueError(f"unsupported hash algorithm: {value}")
        if hashlib.new(name).digest_size < MIN_DIGEST_SIZE:
            raise ValueError(f"digest of {value} is shorter than {MIN_DIGEST_SIZE} bytes")
        return name

    @classmethod
    def build(cls, **kwargs) -> "TotpConfig":
        """Like the constructor, but raises InvalidConfiguration instead of ValidationError."""
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            raise InvalidConfiguration(str(exc)) from exc


class CurrentCodes(BaseModel):
    counter: int
    previous: str
    current: str
    next: str


# ---------------------------
# Request bodies
# ---------------------------
class SecretRequest(BaseModel):
    label: Optional[str] = Field(None, min_length=1)
    issuer: Optional[str] = Field(None, min_length=1)


class VerifyRequest(BaseModel):
    secret: str = Field(..., min_length=1)
    code: Union[StrictStr, StrictInt]


class CodesRequest(BaseModel):
    secret: str = Field(..., min_length=1)
