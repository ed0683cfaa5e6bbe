"""Encrypted record and the aes128gcm body framing."""

from dataclasses import dataclass

from .keys import public_key_from_bytes
from .types import (
    WireFormat,
    MAX_RECORD_SIZE,
    PUBLIC_KEY_SIZE,
    RECORD_HEADER_SIZE,
    SALT_SIZE,
    TAG_SIZE,
    InvalidPublicKeyError,
    InvalidRecordError,
)


@dataclass(frozen=True)
class EncryptedRecord:
    """A single encrypted push message, ready for dispatch."""
    server_public_key: bytes  # 65 bytes
    salt: bytes  # 16 bytes
    ciphertext: bytes  # variable (padded plaintext + 16-byte tag)
    wire_format: WireFormat = WireFormat.AESGCM128

    def __post_init__(self) -> None:
        if len(self.salt) != SALT_SIZE:
            raise InvalidRecordError(f"Salt must be {SALT_SIZE} bytes, got {len(self.salt)}")
        try:
            public_key_from_bytes(self.server_public_key)
        except InvalidPublicKeyError as e:
            raise InvalidRecordError(f"Invalid server public key: {e}") from e
        if len(self.ciphertext) < TAG_SIZE:
            raise InvalidRecordError(
                f"Ciphertext too short: {len(self.ciphertext)} bytes (minimum {TAG_SIZE})"
            )


def encode_record(record: EncryptedRecord, record_size: int = MAX_RECORD_SIZE) -> bytes:
    """
    Encode a record as an aes128gcm message body.

    Format (86-byte header + ciphertext):
        [0-15]   salt (16 bytes)
        [16-19]  record size (uint32 BE)
        [20]     key id length (65)
        [21-85]  server public key (65 bytes)
        [86+]    ciphertext (variable)

    Args:
        record: Record encrypted with the aes128gcm wire format
        record_size: Advertised record size

    Returns:
        Encoded body bytes
    """
    if record.wire_format is not WireFormat.AES128GCM:
        raise InvalidRecordError(
            f"Only aes128gcm records have a body header, got {record.wire_format.value}"
        )
    if len(record.ciphertext) > record_size:
        raise InvalidRecordError(
            f"Ciphertext of {len(record.ciphertext)} bytes exceeds record size {record_size}"
        )

    return (
        record.salt
        + record_size.to_bytes(4, byteorder="big")
        + bytes([len(record.server_public_key)])
        + record.server_public_key
        + record.ciphertext
    )


def decode_record(data: bytes) -> EncryptedRecord:
    """
    Decode an aes128gcm message body into a record.

    Only single-record bodies keyed by the server's public key are accepted.

    Raises:
        InvalidRecordError: If the header is malformed
    """
    if len(data) < RECORD_HEADER_SIZE:
        raise InvalidRecordError(
            f"Data too short: {len(data)} bytes (minimum {RECORD_HEADER_SIZE})"
        )

    salt = data[:SALT_SIZE]
    record_size = int.from_bytes(data[SALT_SIZE:SALT_SIZE + 4], byteorder="big")
    key_id_length = data[SALT_SIZE + 4]

    if record_size <= TAG_SIZE + 1:
        raise InvalidRecordError(f"Record size too small: {record_size}")
    if key_id_length != PUBLIC_KEY_SIZE:
        raise InvalidRecordError(
            f"Key id must be a {PUBLIC_KEY_SIZE}-byte public key, got {key_id_length} bytes"
        )

    offset = RECORD_HEADER_SIZE
    server_public_key = data[offset:offset + key_id_length]
    offset += key_id_length

    ciphertext = data[offset:]
    if len(ciphertext) > record_size:
        raise InvalidRecordError("Multi-record bodies are not supported")

    return EncryptedRecord(
        server_public_key=server_public_key,
        salt=salt,
        ciphertext=ciphertext,
        wire_format=WireFormat.AES128GCM,
    )


def is_aes128gcm_body(data: bytes) -> bool:
    """
    Check if data looks like an aes128gcm body.

    Args:
        data: Bytes to check

    Returns:
        True if the header carries a 65-byte uncompressed point as key id
    """
    if len(data) < RECORD_HEADER_SIZE + PUBLIC_KEY_SIZE + TAG_SIZE:
        return False

    return data[SALT_SIZE + 4] == PUBLIC_KEY_SIZE and data[RECORD_HEADER_SIZE] == 0x04
