"""Request assembly for the two delivery paths.

Both builders are pure: they read a record and return a PushRequest. Nothing
here touches the network.
"""

import base64
import json
from typing import Optional

from .models import DeliveryPath, Notification, PushRequest, Subscription
from .record import EncryptedRecord, encode_record
from .types import (
    WireFormat,
    JSON_CONTENT_TYPE,
    KEY_ID,
    OCTET_STREAM,
    MissingCredentialError,
)

# Header carrying the server's public key, per legacy wire format
_KEY_HEADERS = {
    WireFormat.AESGCM128: "Encryption-Key",
    WireFormat.AESGCM: "Crypto-Key",
}


def b64url_encode(data: bytes, padded: bool = False) -> str:
    """Base64url encode, stripping '=' padding unless asked to keep it."""
    encoded = base64.urlsafe_b64encode(data).decode("ascii")
    return encoded if padded else encoded.rstrip("=")


def build_web_push_request(
    subscription: Subscription,
    notification: Notification,
    record: EncryptedRecord,
) -> PushRequest:
    """
    Build a standard Web Push request.

    Legacy formats send salt and key as unpadded base64url headers with the raw
    ciphertext as body. aes128gcm carries both in the body header instead.
    """
    headers = {
        "Content-Type": OCTET_STREAM,
        "Content-Encoding": record.wire_format.value,
        "TTL": str(notification.ttl),
    }

    if record.wire_format is WireFormat.AES128GCM:
        return PushRequest(
            endpoint=subscription.endpoint,
            headers=headers,
            body=encode_record(record),
        )

    key_header = _KEY_HEADERS[record.wire_format]
    headers[key_header] = f"keyid={KEY_ID};dh={b64url_encode(record.server_public_key)}"
    headers["Encryption"] = f"keyid={KEY_ID};salt={b64url_encode(record.salt)}"

    return PushRequest(
        endpoint=subscription.endpoint,
        headers=headers,
        body=record.ciphertext,
    )


def build_legacy_request(
    subscription: Subscription,
    notification: Notification,
    record: EncryptedRecord,
    api_key: Optional[str],
) -> PushRequest:
    """
    Build a legacy registration-id request.

    Raises:
        MissingCredentialError: If no API key is configured
    """
    if not api_key:
        raise MissingCredentialError("GCM API key required for registration-id delivery")
    if subscription.registration_id is None:
        raise ValueError("Legacy delivery requires a registration id")

    body = json.dumps({
        "registration_ids": [subscription.registration_id],
        "raw_data": base64.b64encode(record.ciphertext).decode("ascii"),
    })

    headers = {
        "Authorization": f"key={api_key}",
        "Encryption": f"keyid={KEY_ID};salt={b64url_encode(record.salt, padded=True)}",
        "Crypto-Key": f"dh={b64url_encode(record.server_public_key, padded=True)}",
        "Content-Encoding": record.wire_format.value,
        "Content-Type": JSON_CONTENT_TYPE,
        "TTL": str(notification.ttl),
    }

    return PushRequest(
        endpoint=subscription.endpoint,
        headers=headers,
        body=body.encode("utf-8"),
    )


def build_request(
    subscription: Subscription,
    notification: Notification,
    record: EncryptedRecord,
    api_key: Optional[str] = None,
) -> PushRequest:
    """Build the request for whichever path the subscription is tagged with."""
    if subscription.delivery_path == DeliveryPath.LEGACY_GCM:
        return build_legacy_request(subscription, notification, record, api_key)
    return build_web_push_request(subscription, notification, record)
