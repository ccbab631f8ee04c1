"""
Top-level sign and verify operations.

generate() raises on failure. verify() never raises for bad input: it returns
a VerificationResult carrying the error.
"""

from typing import Union

import structlog

from .errors import KeyParseError, SigningError
from .keys import parse_private_key, parse_public_key
from .signer import VerificationResult, encode_signature

logger = structlog.get_logger()


def _as_bytes(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


def generate(private_key: Union[bytes, str], message: Union[bytes, str]) -> str:
    """
    Sign ``message`` with a PEM "RSA PRIVATE KEY".

    Returns:
        Base64-encoded RSASSA-PKCS1-v1_5 / SHA-256 signature

    Raises:
        KeyParseError: the key could not be parsed (see subclasses)
        SigningError: the signing primitive failed
    """
    try:
        signing_key = parse_private_key(private_key)
    except KeyParseError as e:
        logger.warning("signature_generation_failed", stage="parse", error_type=type(e).__name__)
        raise

    try:
        signature = signing_key.sign(_as_bytes(message))
    except SigningError as e:
        logger.warning(
            "signature_generation_failed",
            stage="sign",
            key_id=signing_key.key_id,
            error_type=type(e).__name__,
        )
        raise

    logger.info(
        "signature_generated",
        algorithm=signing_key.algorithm.value,
        key_id=signing_key.key_id,
        key_size=signing_key.key_size,
    )
    return encode_signature(signature)


def verify(
    signature: str,
    public_key: Union[bytes, str],
    message: Union[bytes, str],
) -> VerificationResult:
    """
    Check a base64 signature against ``message`` with a PEM "PUBLIC KEY".

    The result unpacks as ``(valid, error)``; ``error`` is None on success,
    otherwise a KeyParseError, SignatureDecodeError or VerificationFailure.
    """
    try:
        verification_key = parse_public_key(public_key)
    except KeyParseError as e:
        logger.warning("signature_verification_failed", stage="parse", error_type=type(e).__name__)
        return VerificationResult(valid=False, error=e)

    result = verification_key.verify_b64(_as_bytes(message), signature)

    if result.valid:
        logger.info(
            "signature_verified",
            algorithm=verification_key.algorithm.value,
            key_id=verification_key.key_id,
        )
    else:
        logger.warning(
            "signature_verification_failed",
            stage="verify",
            key_id=verification_key.key_id,
            error_type=type(result.error).__name__,
        )
    return result


def is_valid(signature: str, public_key: Union[bytes, str], message: Union[bytes, str]) -> bool:
    """Boolean shortcut for verify()."""
    return verify(signature, public_key, message).valid
