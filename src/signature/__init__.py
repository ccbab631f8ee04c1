"""
RSA signatures over arbitrary messages

Supports:
- RSASSA-PKCS1-v1_5 with SHA-256
- PEM "RSA PRIVATE KEY" (PKCS#1) for signing
- PEM "PUBLIC KEY" (PKIX) for verification
"""

from .errors import (
    SignatureError,
    KeyParseError,
    KeyFormatError,
    UnsupportedKeyTypeError,
    KeyPayloadParseError,
    SignatureDecodeError,
    SigningError,
    EntropyError,
    VerificationFailure,
)
from .signer import (
    KeyAlgorithm,
    SigningKey,
    VerificationKey,
    RSASigningKey,
    RSAVerificationKey,
    VerificationResult,
)
from .keys import PemBlock, decode_pem, parse_private_key, parse_public_key
from .operations import generate, verify, is_valid

__version__ = "1.0.0"

__all__ = [
    "generate",
    "verify",
    "is_valid",
    "parse_private_key",
    "parse_public_key",
    "decode_pem",
    "PemBlock",
    "KeyAlgorithm",
    "SigningKey",
    "VerificationKey",
    "RSASigningKey",
    "RSAVerificationKey",
    "VerificationResult",
    "SignatureError",
    "KeyParseError",
    "KeyFormatError",
    "UnsupportedKeyTypeError",
    "KeyPayloadParseError",
    "SignatureDecodeError",
    "SigningError",
    "EntropyError",
    "VerificationFailure",
]
