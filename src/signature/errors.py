"""
Error taxonomy for signature generation and verification.

Every failure surfaced by the library is one of these classes. Lower-level
errors from the cryptography library are chained as ``__cause__``.
"""

from typing import Optional


class SignatureError(Exception):
    """Base class for all signature errors."""
    pass


class KeyParseError(SignatureError):
    """Raised when an encoded key cannot be turned into a capability."""

    def __init__(self, reason: str, key_kind: Optional[str] = None):
        self.reason = reason
        self.key_kind = key_kind
        if key_kind:
            super().__init__(f"failed to parse the {key_kind} key: {reason}")
        else:
            super().__init__(reason)


class KeyFormatError(KeyParseError):
    """The blob does not contain a PEM container."""

    def __init__(self, key_kind: Optional[str] = None):
        super().__init__("no key was found", key_kind)


class UnsupportedKeyTypeError(KeyParseError):
    """
    The container label, or the key decoded from it, is not supported.

    ``code`` is 4041 for an unexpected label and 4042 when the decoded key
    has no matching variant.
    """

    LABEL = 4041
    DECODED_TYPE = 4042

    def __init__(self, code: int, key_kind: Optional[str] = None, detail: str = ""):
        self.code = code
        reason = f"key type not supported [{code}]"
        if detail:
            reason = f"{reason}: {detail}"
        super().__init__(reason, key_kind)


class KeyPayloadParseError(KeyParseError):
    """The container was found but its DER payload is malformed."""
    pass


class SignatureDecodeError(SignatureError):
    """The signature text is not valid base64."""

    def __init__(self, message: str = "invalid signature encoding"):
        super().__init__(message)


class SigningError(SignatureError):
    """The signing primitive failed."""

    def __init__(self, message: str = "could not sign the message"):
        super().__init__(message)


class EntropyError(SigningError):
    """The platform random number generator was unavailable during signing."""

    def __init__(self, message: str = "random number generator unavailable"):
        super().__init__(message)


class VerificationFailure(SignatureError):
    """The signature does not match the message under the given key."""

    def __init__(self, message: str = "signature verification failed"):
        super().__init__(message)
