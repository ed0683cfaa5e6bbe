"""HKDF key derivation for Web Push content encryption.

Two stages, both HKDF-SHA256:
    - Stage A: bind the ECDH secret to the auth secret (skipped without one)
    - Stage B: derive the content-encryption key and nonce from the record salt
"""

from dataclasses import dataclass, field
from typing import Optional

from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .types import (
    WireFormat,
    AUTH_INFO,
    AUTH_SECRET_SIZE,
    CONTENT_ENCODING_PREFIX,
    CURVE_LABEL,
    HASH_LENGTH,
    KEY_SIZE,
    MAX_HKDF_LENGTH,
    NONCE_SIZE,
    SALT_SIZE,
    WEBPUSH_INFO_PREFIX,
    DerivationLengthError,
    InvalidKeyError,
    InvalidSaltError,
)


@dataclass(frozen=True)
class DerivedKeys:
    """Content-encryption key and nonce for a single record."""
    key: bytes = field(repr=False)  # 16 bytes
    nonce: bytes = field(repr=False)  # 12 bytes


def hkdf(ikm: bytes, salt: bytes, info: bytes, length: int) -> bytes:
    """HKDF-SHA256 extract-then-expand."""
    if length > MAX_HKDF_LENGTH:
        raise DerivationLengthError(
            f"HKDF length {length} exceeds maximum of {MAX_HKDF_LENGTH}"
        )
    return HKDF(algorithm=SHA256(), length=length, salt=salt, info=info).derive(ikm)


def build_context(subscriber_public_key: bytes, server_public_key: bytes) -> bytes:
    """
    Build the key context bound into ``aesgcm`` derivation.

    Format:
        "P-256" || 0x00
        || uint16be(len(subscriber)) || subscriber
        || uint16be(len(server)) || server
    """
    return (
        CURVE_LABEL
        + b"\x00"
        + len(subscriber_public_key).to_bytes(2, byteorder="big")
        + subscriber_public_key
        + len(server_public_key).to_bytes(2, byteorder="big")
        + server_public_key
    )


def build_info(label: str, wire_format: WireFormat, context: bytes = b"") -> bytes:
    """
    Build the HKDF info string for a content-encoding label.

    ``aesgcm128`` predates the NUL terminator and has no context.
    """
    info = CONTENT_ENCODING_PREFIX + label.encode("ascii")
    if wire_format is WireFormat.AESGCM128:
        return info
    return info + b"\x00" + context


def build_auth_info(
    subscriber_public_key: bytes,
    server_public_key: bytes,
    wire_format: WireFormat,
) -> bytes:
    """
    Build the HKDF info used to bind the auth secret.

    aes128gcm: "WebPush: info" || 0x00 || subscriber || server
    aesgcm, aesgcm128: "Content-Encoding: auth" || 0x00
    """
    if wire_format is WireFormat.AES128GCM:
        return WEBPUSH_INFO_PREFIX + subscriber_public_key + server_public_key
    return AUTH_INFO


def derive_ikm(
    shared_secret: bytes,
    subscriber_public_key: bytes,
    server_public_key: bytes,
    auth_secret: Optional[bytes] = None,
    wire_format: WireFormat = WireFormat.AESGCM128,
) -> bytes:
    """
    Derive the input keying material for the content keys.

    Without an auth secret the shared secret is used directly.
    """
    if auth_secret is None:
        return shared_secret

    if len(auth_secret) != AUTH_SECRET_SIZE:
        raise InvalidKeyError(
            f"Auth secret must be {AUTH_SECRET_SIZE} bytes, got {len(auth_secret)}"
        )

    info = build_auth_info(subscriber_public_key, server_public_key, wire_format)
    return hkdf(shared_secret, salt=auth_secret, info=info, length=HASH_LENGTH)


def derive_content_keys(
    ikm: bytes,
    salt: bytes,
    subscriber_public_key: bytes,
    server_public_key: bytes,
    wire_format: WireFormat = WireFormat.AESGCM128,
) -> DerivedKeys:
    """Derive the content-encryption key and nonce from the record salt."""
    if not isinstance(salt, (bytes, bytearray)) or len(salt) != SALT_SIZE:
        size = len(salt) if isinstance(salt, (bytes, bytearray)) else type(salt).__name__
        raise InvalidSaltError(f"Salt must be {SALT_SIZE} bytes, got {size}")

    context = b""
    if wire_format is WireFormat.AESGCM:
        context = build_context(subscriber_public_key, server_public_key)

    key_info = build_info(wire_format.value, wire_format, context)
    nonce_info = build_info("nonce", wire_format, context)

    return DerivedKeys(
        key=hkdf(ikm, salt=bytes(salt), info=key_info, length=KEY_SIZE),
        nonce=hkdf(ikm, salt=bytes(salt), info=nonce_info, length=NONCE_SIZE),
    )


def derive_keys(
    shared_secret: bytes,
    salt: bytes,
    subscriber_public_key: bytes,
    server_public_key: bytes,
    auth_secret: Optional[bytes] = None,
    wire_format: WireFormat = WireFormat.AESGCM128,
) -> DerivedKeys:
    """
    Run both derivation stages.

    Args:
        shared_secret: 32-byte ECDH secret
        salt: 16-byte record salt
        subscriber_public_key: Subscriber's 65-byte point
        server_public_key: Server's ephemeral 65-byte point
        auth_secret: Optional 16-byte auth secret
        wire_format: Wire format selecting the labels and context

    Returns:
        DerivedKeys for the record
    """
    ikm = derive_ikm(
        shared_secret,
        subscriber_public_key,
        server_public_key,
        auth_secret=auth_secret,
        wire_format=wire_format,
    )
    return derive_content_keys(
        ikm,
        salt,
        subscriber_public_key,
        server_public_key,
        wire_format=wire_format,
    )
