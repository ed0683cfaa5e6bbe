"""Type definitions for Web Push message encryption."""

from enum import Enum


class WireFormat(Enum):
    """Content encoding understood by a push endpoint.

    The value is the ``Content-Encoding`` label sent with the request.
    """
    AESGCM128 = "aesgcm128"
    AESGCM = "aesgcm"
    AES128GCM = "aes128gcm"

    @property
    def is_legacy(self) -> bool:
        """Whether this format uses the length-prefixed padding layout."""
        return self is not WireFormat.AES128GCM


# Key and record sizes
PUBLIC_KEY_SIZE = 65  # 0x04 || X || Y
PRIVATE_KEY_SIZE = 32
SHARED_SECRET_SIZE = 32
SALT_SIZE = 16
AUTH_SECRET_SIZE = 16
KEY_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
PAD_LENGTH_SIZE = 2
MAX_RECORD_SIZE = 4096

# HKDF-SHA256 output limit
HASH_LENGTH = 32
MAX_HKDF_LENGTH = 255 * HASH_LENGTH

# aes128gcm body header: salt || rs || idlen || keyid
RECORD_HEADER_SIZE = SALT_SIZE + 4 + 1
PADDING_DELIMITER = 0x02

# Derivation labels
CURVE_LABEL = b"P-256"
AUTH_INFO = b"Content-Encoding: auth\x00"
WEBPUSH_INFO_PREFIX = b"WebPush: info\x00"
CONTENT_ENCODING_PREFIX = b"Content-Encoding: "

# Header values
KEY_ID = "p256dh"
OCTET_STREAM = "application/octet-stream"
JSON_CONTENT_TYPE = "application/json"


# Exception types
class WebPushError(Exception):
    """Base exception for Web Push errors."""
    pass


class UnsupportedCurveError(WebPushError):
    """Requested curve is not available from the crypto provider."""
    pass


class KeyGenerationError(WebPushError):
    """Key pair generation failed."""
    pass


class InvalidKeyError(WebPushError):
    """Malformed or wrong-curve key material."""
    pass


class InvalidPublicKeyError(InvalidKeyError):
    """Public key is not a valid uncompressed P-256 point."""
    pass


class InvariantError(WebPushError):
    """A programming error in how the pipeline was driven. Never retried."""
    pass


class InvalidSaltError(InvariantError):
    """Salt is missing or not exactly 16 bytes."""
    pass


class DerivationLengthError(InvariantError):
    """HKDF output length exceeds 255 * HashLen."""
    pass


class PayloadTooLargeError(WebPushError):
    """Padded payload does not fit in a single record."""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"Payload too large: {size} bytes (max {max_size})")


class AuthenticationFailureError(WebPushError):
    """AEAD tag did not verify."""
    pass


class MissingCredentialError(WebPushError):
    """Legacy delivery requested without an API key."""
    pass


class InvalidRecordError(WebPushError):
    """Encrypted record is malformed."""
    pass
