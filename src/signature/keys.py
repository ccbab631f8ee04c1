"""
Key Parser

Turns a PEM-encoded key into a signing or verification capability.

Accepted containers:
- "RSA PRIVATE KEY" - PKCS#1 RSAPrivateKey, for signing
- "PUBLIC KEY" - PKIX SubjectPublicKeyInfo, for verification
"""

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

import structlog
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .errors import KeyFormatError, KeyPayloadParseError, UnsupportedKeyTypeError
from .signer import (
    SIGNING_KEY_VARIANTS,
    VERIFICATION_KEY_VARIANTS,
    SigningKey,
    VerificationKey,
)

logger = structlog.get_logger()

PRIVATE_KEY_LABEL = "RSA PRIVATE KEY"
PUBLIC_KEY_LABEL = "PUBLIC KEY"

_BEGIN = re.compile(rb"-----BEGIN ([^\r\n-]*)-----[ \t]*\r?\n")
_HEADER = re.compile(r"^([\w-]+):\s*(.*)$")


@dataclass
class PemBlock:
    """A decoded PEM container."""
    type: str
    payload: bytes
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_encrypted(self) -> bool:
        return "ENCRYPTED" in self.headers.get("Proc-Type", "")


def decode_pem(data: Union[bytes, str]) -> Optional[PemBlock]:
    """
    Decode the first well-formed PEM block in ``data``.

    Text before the BEGIN line is skipped, and so is any malformed block.
    Returns None when no complete, well-formed block is present.
    """
    if isinstance(data, str):
        data = data.encode('utf-8')

    begin = _BEGIN.search(data)
    while begin is not None:
        block = _decode_block(data, begin)
        if block is not None:
            return block
        begin = _BEGIN.search(data, begin.end())
    return None


def _decode_block(data: bytes, begin) -> Optional[PemBlock]:
    label = begin.group(1)
    end_marker = b"-----END " + label + b"-----"
    end = data.find(end_marker, begin.end())
    if end < 0:
        return None

    try:
        lines = data[begin.end():end].decode('ascii').splitlines()
    except UnicodeDecodeError:
        return None

    headers: Dict[str, str] = {}
    body_start = 0
    if lines and _HEADER.match(lines[0].strip()):
        # RFC 1421 headers end at the first blank line
        for i, line in enumerate(lines):
            if not line.strip():
                body_start = i + 1
                break
            match = _HEADER.match(line.strip())
            if match is None:
                return None
            headers[match.group(1)] = match.group(2).strip()
        else:
            return None

    body = "".join(line.strip() for line in lines[body_start:])
    try:
        payload = base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        return None

    return PemBlock(type=label.decode("ascii"), payload=payload, headers=headers)


def _decode_container(data, key_kind: str, expected_label: str) -> bytes:
    block = decode_pem(data)
    if block is None:
        raise KeyFormatError(key_kind)

    if block.type != expected_label:
        logger.warning("unsupported_key_label", key_kind=key_kind, label=block.type)
        raise UnsupportedKeyTypeError(
            UnsupportedKeyTypeError.LABEL, key_kind, detail=block.type,
        )

    if block.is_encrypted:
        raise KeyPayloadParseError("encrypted keys are not supported", key_kind)

    return block.payload


def signing_key_from(raw_key) -> SigningKey:
    """Wrap a decoded private key in the matching signing variant."""
    for variant in SIGNING_KEY_VARIANTS:
        if isinstance(raw_key, variant.key_type):
            return variant(raw_key)
    raise UnsupportedKeyTypeError(
        UnsupportedKeyTypeError.DECODED_TYPE, "private", detail=type(raw_key).__name__,
    )


def verification_key_from(raw_key) -> VerificationKey:
    """Wrap a decoded public key in the matching verification variant."""
    for variant in VERIFICATION_KEY_VARIANTS:
        if isinstance(raw_key, variant.key_type):
            return variant(raw_key)
    raise UnsupportedKeyTypeError(
        UnsupportedKeyTypeError.DECODED_TYPE, "public", detail=type(raw_key).__name__,
    )


def _load_pkcs1_private_key(der: bytes):
    """
    Decode a PKCS#1 RSAPrivateKey.

    The DER loader also takes PKCS#8 and SEC1 bodies, so the key must be RSA
    and must re-encode to exactly the bytes given.
    """
    try:
        raw_key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyPayloadParseError(str(e) or "malformed key payload", "private") from e

    if not isinstance(raw_key, rsa.RSAPrivateKey):
        raise KeyPayloadParseError(
            f"payload is not a PKCS#1 RSA private key ({type(raw_key).__name__})", "private",
        )

    encoded = raw_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    if encoded != der:
        raise KeyPayloadParseError("payload is not a PKCS#1 RSA private key", "private")
    return raw_key


def _load_pkix_public_key(der: bytes):
    """
    Decode a PKIX SubjectPublicKeyInfo.

    The DER loader also takes a bare PKCS#1 RSAPublicKey, so the key must
    re-encode to exactly the bytes given.
    """
    try:
        raw_key = serialization.load_der_public_key(der)
        encoded = raw_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise KeyPayloadParseError(str(e) or "malformed key payload", "public") from e

    if encoded != der:
        raise KeyPayloadParseError("payload is not a PKIX public key", "public")
    return raw_key


def parse_private_key(data: Union[bytes, str]) -> SigningKey:
    """
    Parse a PEM "RSA PRIVATE KEY" into a signing capability.

    Raises:
        KeyFormatError: no PEM container in ``data``
        UnsupportedKeyTypeError: wrong label
        KeyPayloadParseError: the DER payload is malformed or not PKCS#1
    """
    der = _decode_container(data, "private", PRIVATE_KEY_LABEL)
    raw_key = _load_pkcs1_private_key(der)

    key = signing_key_from(raw_key)
    logger.debug("private_key_parsed", key_id=key.key_id, key_size=key.key_size)
    return key


def parse_public_key(data: Union[bytes, str]) -> VerificationKey:
    """
    Parse a PEM "PUBLIC KEY" into a verification capability.

    Raises:
        KeyFormatError: no PEM container in ``data``
        UnsupportedKeyTypeError: wrong label, or a PKIX key of an unsupported
            algorithm
        KeyPayloadParseError: the DER payload is malformed or not PKIX
    """
    der = _decode_container(data, "public", PUBLIC_KEY_LABEL)
    raw_key = _load_pkix_public_key(der)

    key = verification_key_from(raw_key)
    logger.debug("public_key_parsed", key_id=key.key_id, key_size=key.key_size)
    return key
