"""
Signature Engine

RSASSA-PKCS1-v1_5 over a SHA-256 digest. The scheme is fixed: callers cannot
choose the hash or the padding.

Capabilities:
- SigningKey - holds a private key, can only sign
- VerificationKey - holds a public key, can only verify

Each supported algorithm is one variant of each capability. RSA is the only
variant today.
"""

import base64
import binascii
import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterator, Optional, Tuple, Type

import structlog
from cryptography.exceptions import InternalError, InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

from .errors import (
    EntropyError,
    SignatureDecodeError,
    SignatureError,
    SigningError,
    VerificationFailure,
)

logger = structlog.get_logger()


class KeyAlgorithm(Enum):
    """Supported key algorithms."""
    RSA = "RSA"


def digest(data: bytes) -> bytes:
    """SHA-256 digest of the message."""
    hasher = hashes.Hash(hashes.SHA256())
    hasher.update(data)
    return hasher.finalize()


def encode_signature(signature: bytes) -> str:
    """Standard base64 with padding."""
    return base64.b64encode(signature).decode('ascii')


def decode_signature(signature_b64: str) -> bytes:
    """
    Decode a base64 signature.

    Line breaks are ignored; any other character outside the standard
    alphabet, or missing padding, raises SignatureDecodeError.
    """
    if isinstance(signature_b64, bytes):
        signature_b64 = signature_b64.decode('ascii', errors='replace')
    if not isinstance(signature_b64, str):
        raise SignatureDecodeError(
            f"invalid signature encoding: expected str, got {type(signature_b64).__name__}"
        )
    cleaned = signature_b64.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SignatureDecodeError(f"invalid signature encoding: {e}") from e


def _key_id(public_key) -> str:
    public_der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(public_der).hexdigest()[:16]


@dataclass
class VerificationResult:
    """
    Result of a verification.

    Unpacks as ``(valid, error)``.
    """
    valid: bool
    error: Optional[SignatureError] = None
    key_id: Optional[str] = None

    def __iter__(self) -> Iterator:
        return iter((self.valid, self.error))

    def to_dict(self):
        return {
            "valid": self.valid,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "key_id": self.key_id,
        }


class SigningKey(ABC):
    """A parsed private key bound to the sign operation."""

    # Runtime type of the cryptography key object this variant wraps
    key_type: ClassVar[Type]

    @property
    @abstractmethod
    def algorithm(self) -> KeyAlgorithm:
        pass

    @property
    @abstractmethod
    def key_size(self) -> int:
        """Modulus size in bits."""
        pass

    @property
    @abstractmethod
    def key_id(self) -> str:
        pass

    @abstractmethod
    def sign(self, data: bytes) -> bytes:
        """Hash ``data`` and sign the digest. Raises SigningError."""
        pass

    def sign_b64(self, data: bytes) -> str:
        """Sign and return the base64-encoded signature."""
        return encode_signature(self.sign(data))


class VerificationKey(ABC):
    """A parsed public key bound to the verify operation."""

    key_type: ClassVar[Type]

    @property
    @abstractmethod
    def algorithm(self) -> KeyAlgorithm:
        pass

    @property
    @abstractmethod
    def key_size(self) -> int:
        pass

    @property
    @abstractmethod
    def key_id(self) -> str:
        pass

    @abstractmethod
    def verify(self, data: bytes, signature: bytes) -> None:
        """Hash ``data`` and check the signature. Raises VerificationFailure."""
        pass

    def verify_b64(self, data: bytes, signature_b64: str) -> VerificationResult:
        """Verify a base64-encoded signature without raising."""
        try:
            signature = decode_signature(signature_b64)
            self.verify(data, signature)
        except SignatureError as e:
            return VerificationResult(valid=False, error=e, key_id=self.key_id)
        return VerificationResult(valid=True, key_id=self.key_id)


class RSASigningKey(SigningKey):
    """RSA private key, PKCS#1 v1.5 padding, SHA-256."""

    key_type = rsa.RSAPrivateKey

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self._private_key = private_key
        self._key_id = _key_id(private_key.public_key())

    @property
    def algorithm(self) -> KeyAlgorithm:
        return KeyAlgorithm.RSA

    @property
    def key_size(self) -> int:
        return self._private_key.key_size

    @property
    def key_id(self) -> str:
        return self._key_id

    def sign(self, data: bytes) -> bytes:
        hashed = digest(data)
        try:
            return self._private_key.sign(
                hashed,
                padding.PKCS1v15(),
                utils.Prehashed(hashes.SHA256()),
            )
        except InternalError as e:
            logger.error("signing_entropy_unavailable", key_id=self._key_id)
            raise EntropyError() from e
        except (ValueError, TypeError) as e:
            raise SigningError(f"could not sign the message: {e}") from e


class RSAVerificationKey(VerificationKey):
    """RSA public key, PKCS#1 v1.5 padding, SHA-256."""

    key_type = rsa.RSAPublicKey

    def __init__(self, public_key: rsa.RSAPublicKey):
        self._public_key = public_key
        self._key_id = _key_id(public_key)

    @property
    def algorithm(self) -> KeyAlgorithm:
        return KeyAlgorithm.RSA

    @property
    def key_size(self) -> int:
        return self._public_key.key_size

    @property
    def key_id(self) -> str:
        return self._key_id

    def verify(self, data: bytes, signature: bytes) -> None:
        hashed = digest(data)
        try:
            self._public_key.verify(
                signature,
                hashed,
                padding.PKCS1v15(),
                utils.Prehashed(hashes.SHA256()),
            )
        except InvalidSignature as e:
            raise VerificationFailure() from e


# Closed sets of variants. A new algorithm adds one entry to each.
SIGNING_KEY_VARIANTS: Tuple[Type[SigningKey], ...] = (RSASigningKey,)
VERIFICATION_KEY_VARIANTS: Tuple[Type[VerificationKey], ...] = (RSAVerificationKey,)
