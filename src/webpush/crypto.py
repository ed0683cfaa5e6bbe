"""Encryption and decryption of Web Push payloads."""

import os
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .derivation import DerivedKeys, derive_keys
from .keys import RandomSource, ecdh, generate_keypair, public_key_from_bytes, public_key_to_bytes
from .record import EncryptedRecord
from .types import (
    WireFormat,
    MAX_RECORD_SIZE,
    PAD_LENGTH_SIZE,
    PADDING_DELIMITER,
    SALT_SIZE,
    TAG_SIZE,
    AuthenticationFailureError,
    InvalidRecordError,
    PayloadTooLargeError,
)


def max_padded_size(wire_format: WireFormat) -> int:
    """Largest padded plaintext that fits in one record."""
    if wire_format is WireFormat.AES128GCM:
        # rs covers the tag in aes128gcm
        return MAX_RECORD_SIZE - TAG_SIZE
    return MAX_RECORD_SIZE


def pad(plaintext: bytes, pad_target: int = 0, wire_format: WireFormat = WireFormat.AESGCM128) -> bytes:
    """
    Pad a plaintext for encryption.

    Legacy layout: uint16be(n) || n zero bytes || plaintext
    aes128gcm layout: plaintext || 0x02 || n zero bytes

    where n = max(0, pad_target - len(plaintext)).

    Raises:
        PayloadTooLargeError: If the padded plaintext does not fit in a record
    """
    if pad_target < 0:
        raise ValueError(f"Pad target must be non-negative, got {pad_target}")

    padding_length = max(0, pad_target - len(plaintext))

    if wire_format.is_legacy:
        size = PAD_LENGTH_SIZE + padding_length + len(plaintext)
    else:
        size = len(plaintext) + 1 + padding_length

    limit = max_padded_size(wire_format)
    if size > limit:
        raise PayloadTooLargeError(size, limit)

    if wire_format.is_legacy:
        return padding_length.to_bytes(PAD_LENGTH_SIZE, byteorder="big") + bytes(padding_length) + plaintext
    return plaintext + bytes([PADDING_DELIMITER]) + bytes(padding_length)


def unpad(padded: bytes, wire_format: WireFormat = WireFormat.AESGCM128) -> bytes:
    """
    Strip padding from a decrypted record.

    Raises:
        InvalidRecordError: If the padding is malformed
    """
    if wire_format.is_legacy:
        if len(padded) < PAD_LENGTH_SIZE:
            raise InvalidRecordError("Record too short for padding length")
        padding_length = int.from_bytes(padded[:PAD_LENGTH_SIZE], byteorder="big")
        end = PAD_LENGTH_SIZE + padding_length
        if end > len(padded):
            raise InvalidRecordError(f"Padding length {padding_length} exceeds record")
        if any(padded[PAD_LENGTH_SIZE:end]):
            raise InvalidRecordError("Padding contains non-zero bytes")
        return padded[end:]

    stripped = padded.rstrip(b"\x00")
    if not stripped or stripped[-1] != PADDING_DELIMITER:
        raise InvalidRecordError("Missing padding delimiter")
    return stripped[:-1]


def aead_encrypt(keys: DerivedKeys, padded: bytes) -> bytes:
    """AES-128-GCM encrypt; returns ciphertext || tag."""
    return AESGCM(keys.key).encrypt(keys.nonce, padded, None)


def aead_decrypt(keys: DerivedKeys, ciphertext: bytes) -> bytes:
    """
    AES-128-GCM decrypt and verify.

    Raises:
        AuthenticationFailureError: If the tag does not verify
    """
    try:
        return AESGCM(keys.key).decrypt(keys.nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationFailureError("Authentication tag mismatch") from e


def encrypt(
    payload: bytes,
    subscriber_public_key: Union[ec.EllipticCurvePublicKey, bytes],
    auth_secret: Optional[bytes] = None,
    pad_target: int = 0,
    wire_format: WireFormat = WireFormat.AESGCM128,
    rng: Optional[RandomSource] = None,
) -> EncryptedRecord:
    """
    Encrypt a payload for a push subscription.

    A fresh ephemeral key pair and salt are drawn for every call.

    Args:
        payload: Raw bytes to encrypt
        subscriber_public_key: Subscriber's P-256 public key or 65-byte point
        auth_secret: Optional 16-byte auth secret from the subscription
        pad_target: Minimum plaintext length before padding stops
        wire_format: Wire format to encrypt for
        rng: Optional secure random source; defaults to os.urandom

    Returns:
        EncryptedRecord containing the server public key, salt, and ciphertext
    """
    if isinstance(subscriber_public_key, (bytes, bytearray)):
        subscriber_public_key = public_key_from_bytes(bytes(subscriber_public_key))

    # Size check first, before any key material is produced
    padded = pad(payload, pad_target, wire_format)

    server_private, server_public = generate_keypair(rng=rng)
    salt = (rng or os.urandom)(SALT_SIZE)

    subscriber_pub_bytes = public_key_to_bytes(subscriber_public_key)
    server_pub_bytes = public_key_to_bytes(server_public)

    shared_secret = ecdh(server_private, subscriber_public_key)
    keys = derive_keys(
        shared_secret,
        salt,
        subscriber_pub_bytes,
        server_pub_bytes,
        auth_secret=auth_secret,
        wire_format=wire_format,
    )

    return EncryptedRecord(
        server_public_key=server_pub_bytes,
        salt=salt,
        ciphertext=aead_encrypt(keys, padded),
        wire_format=wire_format,
    )


def decrypt(
    record: EncryptedRecord,
    subscriber_private_key: ec.EllipticCurvePrivateKey,
    auth_secret: Optional[bytes] = None,
) -> bytes:
    """
    Decrypt a record with the subscriber's private key.

    Args:
        record: The encrypted record
        subscriber_private_key: Subscriber's P-256 private key
        auth_secret: The auth secret used at encryption time, if any

    Returns:
        The original payload

    Raises:
        AuthenticationFailureError: If the record was tampered with or keys differ
        InvalidRecordError: If the decrypted padding is malformed
    """
    subscriber_pub_bytes = public_key_to_bytes(subscriber_private_key.public_key())

    shared_secret = ecdh(subscriber_private_key, record.server_public_key)
    keys = derive_keys(
        shared_secret,
        record.salt,
        subscriber_pub_bytes,
        record.server_public_key,
        auth_secret=auth_secret,
        wire_format=record.wire_format,
    )

    padded = aead_decrypt(keys, record.ciphertext)
    return unpad(padded, record.wire_format)
