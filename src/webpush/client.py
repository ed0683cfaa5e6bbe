"""
Web Push client for delivering encrypted notifications.

The PushService ties the pipeline together: encrypt the payload for the
subscription, assemble the request for its delivery path, and hand it to the
transport.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .crypto import encrypt
from .dispatch import build_request
from .keys import RandomSource
from .models import (
    DeliveryPath,
    DeliveryResult,
    DeliveryStatus,
    Notification,
    PushRequest,
    Subscription,
)
from .record import EncryptedRecord
from .transport import DEFAULT_TIMEOUT, PushTransport, RequestsTransport
from .types import WireFormat, InvariantError, MissingCredentialError, WebPushError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushConfig:
    """Configuration for the push service. Read-only once constructed."""

    gcm_api_key: Optional[str] = None
    """API key for legacy registration-id delivery (optional)."""

    wire_format: WireFormat = WireFormat.AESGCM128
    """Wire format for the standard Web Push path."""

    timeout: float = DEFAULT_TIMEOUT
    """Transport request timeout in seconds."""

    max_workers: int = 4
    """Thread pool size for batch sends."""

    def __repr__(self) -> str:
        key = "<set>" if self.gcm_api_key else None
        return (
            f"PushConfig(gcm_api_key={key!r}, wire_format={self.wire_format.value!r}, "
            f"timeout={self.timeout!r}, max_workers={self.max_workers!r})"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PushConfig":
        """
        Creates configuration from environment variables.

        Reads WEBPUSH_GCM_API_KEY, WEBPUSH_CONTENT_ENCODING, WEBPUSH_TIMEOUT
        and WEBPUSH_MAX_WORKERS; anything unset keeps its default.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            gcm_api_key=env.get("WEBPUSH_GCM_API_KEY") or None,
            wire_format=WireFormat(env.get("WEBPUSH_CONTENT_ENCODING", defaults.wire_format.value)),
            timeout=float(env.get("WEBPUSH_TIMEOUT", defaults.timeout)),
            max_workers=int(env.get("WEBPUSH_MAX_WORKERS", defaults.max_workers)),
        )

    def with_gcm_api_key(self, api_key: str) -> "PushConfig":
        """Sets the legacy delivery API key."""
        return replace(self, gcm_api_key=api_key)


class PushService:
    """
    Sends end-to-end encrypted notifications to push subscriptions.

    Example usage:
        ```python
        service = PushService(PushConfig(wire_format=WireFormat.AES128GCM))

        subscription = Subscription.from_dict(subscription_json)
        response = service.send(subscription, Notification(b"hello", ttl=60))
        if response.status_code == 410:
            forget(subscription)
        ```
    """

    def __init__(
        self,
        config: Optional[PushConfig] = None,
        transport: Optional[PushTransport] = None,
    ) -> None:
        """
        Initialize the push service.

        Args:
            config: Service configuration (default: no API key, aesgcm128).
            transport: Transport for delivery (default: RequestsTransport).
        """
        self.config = config or PushConfig()
        self.transport = transport or RequestsTransport(timeout=self.config.timeout)

    def wire_format_for(self, subscription: Subscription) -> WireFormat:
        """Registration-id delivery is always aesgcm."""
        if subscription.delivery_path == DeliveryPath.LEGACY_GCM:
            return WireFormat.AESGCM
        return self.config.wire_format

    def encrypt_for(
        self,
        subscription: Subscription,
        notification: Notification,
        rng: Optional[RandomSource] = None,
    ) -> EncryptedRecord:
        """Encrypt a notification's payload for a subscription."""
        return encrypt(
            notification.payload,
            subscription.public_key,
            auth_secret=subscription.auth_secret,
            pad_target=notification.pad_target,
            wire_format=self.wire_format_for(subscription),
            rng=rng,
        )

    def prepare(
        self,
        subscription: Subscription,
        notification: Notification,
        rng: Optional[RandomSource] = None,
    ) -> PushRequest:
        """
        Encrypt and assemble the request without sending it.

        Raises:
            MissingCredentialError: If legacy delivery has no API key. Checked
                before any key material is generated.
        """
        if subscription.delivery_path == DeliveryPath.LEGACY_GCM and not self.config.gcm_api_key:
            raise MissingCredentialError("GCM API key required for registration-id delivery")

        record = self.encrypt_for(subscription, notification, rng=rng)
        return build_request(subscription, notification, record, self.config.gcm_api_key)

    def send(self, subscription: Subscription, notification: Notification) -> Any:
        """
        Encrypt and deliver one notification.

        Returns:
            The transport's response, unmodified

        Raises:
            WebPushError: For key, record, size or credential errors
        """
        request = self.prepare(subscription, notification)
        logger.debug(
            "Sending %s notification to %s (%s, %d bytes)",
            subscription.delivery_path.value,
            subscription.endpoint,
            request.headers["Content-Encoding"],
            len(request.body),
        )
        return self.transport.send(request)

    def send_batch(
        self,
        deliveries: Iterable[Tuple[Subscription, Notification]],
    ) -> List[DeliveryResult]:
        """
        Deliver many notifications concurrently.

        Each notification runs its own encrypt and send job. A failure only
        affects that notification; invariant violations still propagate.

        Returns:
            One DeliveryResult per delivery, in input order
        """
        deliveries = list(deliveries)
        if not deliveries:
            return []

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            return list(pool.map(lambda item: self._deliver(*item), deliveries))

    def _deliver(self, subscription: Subscription, notification: Notification) -> DeliveryResult:
        try:
            response = self.send(subscription, notification)
        except InvariantError:
            raise
        except (WebPushError, OSError) as e:
            logger.warning("Delivery to %s failed: %s", subscription.endpoint, e)
            return DeliveryResult(subscription, DeliveryStatus.FAILED, error=e)
        return DeliveryResult(subscription, DeliveryStatus.SENT, response=response)
