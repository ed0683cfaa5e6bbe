"""
webpush - End-to-end encrypted Web Push messages

Python implementation of Web Push message encryption using P-256 ECDH,
HKDF-SHA256 and AES-128-GCM, with delivery over the standard Web Push and
legacy registration-id paths.
"""

from .keys import (
    generate_keypair,
    ecdh,
    public_key_to_bytes,
    public_key_from_bytes,
    private_key_to_bytes,
    private_key_from_bytes,
)
from .derivation import DerivedKeys, derive_keys, derive_ikm, derive_content_keys
from .crypto import encrypt, decrypt, pad, unpad
from .record import EncryptedRecord, encode_record, decode_record, is_aes128gcm_body
from .models import (
    DeliveryPath,
    Subscription,
    Notification,
    PushRequest,
    DeliveryStatus,
    DeliveryResult,
)
from .dispatch import build_web_push_request, build_legacy_request, build_request
from .transport import PushTransport, RequestsTransport
from .client import PushConfig, PushService
from .types import (
    WireFormat,
    MAX_RECORD_SIZE,
    WebPushError,
    UnsupportedCurveError,
    KeyGenerationError,
    InvalidKeyError,
    InvalidPublicKeyError,
    InvariantError,
    InvalidSaltError,
    DerivationLengthError,
    PayloadTooLargeError,
    AuthenticationFailureError,
    MissingCredentialError,
    InvalidRecordError,
)

__version__ = "0.1.0"

__all__ = [
    # Keys
    "generate_keypair",
    "ecdh",
    "public_key_to_bytes",
    "public_key_from_bytes",
    "private_key_to_bytes",
    "private_key_from_bytes",
    # Derivation
    "DerivedKeys",
    "derive_keys",
    "derive_ikm",
    "derive_content_keys",
    # Crypto
    "encrypt",
    "decrypt",
    "pad",
    "unpad",
    # Record
    "EncryptedRecord",
    "encode_record",
    "decode_record",
    "is_aes128gcm_body",
    # Models
    "DeliveryPath",
    "Subscription",
    "Notification",
    "PushRequest",
    "DeliveryStatus",
    "DeliveryResult",
    # Dispatch
    "build_web_push_request",
    "build_legacy_request",
    "build_request",
    # Transport
    "PushTransport",
    "RequestsTransport",
    # Client
    "PushConfig",
    "PushService",
    # Types
    "WireFormat",
    "MAX_RECORD_SIZE",
    # Errors
    "WebPushError",
    "UnsupportedCurveError",
    "KeyGenerationError",
    "InvalidKeyError",
    "InvalidPublicKeyError",
    "InvariantError",
    "InvalidSaltError",
    "DerivationLengthError",
    "PayloadTooLargeError",
    "AuthenticationFailureError",
    "MissingCredentialError",
    "InvalidRecordError",
]
