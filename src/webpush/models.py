"""Models for push subscriptions, notifications, and delivery results."""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


def b64url_decode(data: str) -> bytes:
    """Decode base64url with or without padding."""
    data = data.strip()
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


class DeliveryPath(Enum):
    """Which wire format a subscription is delivered with."""
    WEB_PUSH = "web_push"
    LEGACY_GCM = "legacy_gcm"


@dataclass(frozen=True)
class Subscription:
    """A push subscription: endpoint plus the subscriber's key material."""
    endpoint: str
    public_key: bytes  # 65-byte uncompressed point
    auth_secret: Optional[bytes] = field(default=None, repr=False)  # 16 bytes
    registration_id: Optional[str] = None

    @property
    def delivery_path(self) -> DeliveryPath:
        """Legacy delivery when the subscription carries a registration id."""
        if self.registration_id is not None:
            return DeliveryPath.LEGACY_GCM
        return DeliveryPath.WEB_PUSH

    @classmethod
    def from_dict(cls, data: dict, registration_id: Optional[str] = None) -> "Subscription":
        """
        Create a subscription from the browser's ``PushSubscription.toJSON()`` shape.

        Expected shape::

            {"endpoint": "...", "keys": {"p256dh": "<b64url>", "auth": "<b64url>"}}
        """
        keys = data.get("keys") or {}
        if "endpoint" not in data or "p256dh" not in keys:
            raise ValueError("Subscription requires 'endpoint' and 'keys.p256dh'")

        auth = keys.get("auth")
        return cls(
            endpoint=data["endpoint"],
            public_key=b64url_decode(keys["p256dh"]),
            auth_secret=b64url_decode(auth) if auth else None,
            registration_id=registration_id,
        )


@dataclass(frozen=True)
class Notification:
    """A payload to deliver to one subscription."""
    payload: bytes
    ttl: int = 0
    pad_target: int = 0

    def __post_init__(self) -> None:
        if self.ttl < 0:
            raise ValueError(f"TTL must be non-negative, got {self.ttl}")
        if self.pad_target < 0:
            raise ValueError(f"Pad target must be non-negative, got {self.pad_target}")


@dataclass(frozen=True)
class PushRequest:
    """A fully assembled HTTP request for the transport."""
    endpoint: str
    headers: dict
    body: bytes


class DeliveryStatus(Enum):
    """Outcome of one notification in a batch."""
    SENT = "sent"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Result of one notification in a batch send."""
    subscription: Subscription
    status: DeliveryStatus
    response: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """Whether the request was handed to the transport without error."""
        return self.status == DeliveryStatus.SENT
