"""Test vectors for Web Push encryption.

The aes128gcm vector is RFC 8291, Appendix A.
"""

import hashlib
import hmac

from webpush.models import b64url_decode


RFC8291_PLAINTEXT = b"When I grow up, I want to be a watermelon"

RFC8291_AS_PRIVATE = b64url_decode("yfWPiYE-n46HLnH0KqZOF1fJJU3MYrct3AELtAQ-oRw")
RFC8291_AS_PUBLIC = b64url_decode(
    "BP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCYLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A8"
)
RFC8291_UA_PRIVATE = b64url_decode("q1dXpw3UpT5VOmu_cf_v6ih07Aems3njxI-JWgLcM94")
RFC8291_UA_PUBLIC = b64url_decode(
    "BCVxsr7N_eNgVRqvHtD0zTZsEc6-VV-JvLexhqUzORcxaOzi6-AYWXvTBHm4bjyPjs7Vd8pZGH6SRpkNtoIAiw4"
)
RFC8291_SALT = b64url_decode("DGv6ra1nlYgDCS1FRnbzlw")
RFC8291_AUTH_SECRET = b64url_decode("BTBZMqHH6r4Tts7J_aSIgg")
RFC8291_BODY = b64url_decode(
    "DGv6ra1nlYgDCS1FRnbzlwAAEABBBP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vC"
    "YLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A_yl95bQpu6cVPTpK4Mqgkf1CXztLVBSt2Ks3oZwbuwXPXL"
    "WyouBWLVWGNWQexSgSxsj_Qulcy4a-fN"
)

TEST_ENDPOINT = "https://push.example.net/push/JzLQ3raZJfFBR0aqvOMsLrt54w4rJUsV"
TEST_API_KEY = "AIzaSyTestKey"
TEST_REGISTRATION_ID = "abc123"

# Payloads covering edge cases
TEST_PAYLOADS = {
    "empty": b"",
    "hello": b"hello",
    "binary": bytes(range(256)),
    "json": b'{"title": "Hi", "body": "There"}',
    "utf8": "Grüße 👋".encode("utf-8"),
}


class SeededRandom:
    """Deterministic byte source: SHA-256 in counter mode over a seed."""

    def __init__(self, seed: bytes) -> None:
        self._seed = seed
        self._counter = 0
        self._buffer = b""

    def __call__(self, n: int) -> bytes:
        while len(self._buffer) < n:
            block = hashlib.sha256(self._seed + self._counter.to_bytes(8, "big")).digest()
            self._buffer += block
            self._counter += 1
        out, self._buffer = self._buffer[:n], self._buffer[n:]
        return out


class FixedSource:
    """Byte source that replays fixed chunks in order."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = list(chunks)

    def __call__(self, n: int) -> bytes:
        chunk = self._chunks.pop(0)
        assert len(chunk) == n, f"requested {n} bytes, next chunk has {len(chunk)}"
        return chunk


def reference_hkdf(ikm: bytes, salt: bytes, info: bytes, length: int) -> bytes:
    """RFC 5869 HKDF-SHA256 written out with hmac, independent of the library."""
    prk = hmac.new(salt, ikm, hashlib.sha256).digest()
    okm, block, counter = b"", b"", 1
    while len(okm) < length:
        block = hmac.new(prk, block + info + bytes([counter]), hashlib.sha256).digest()
        okm += block
        counter += 1
    return okm[:length]


def reference_legacy_keys(
    shared_secret: bytes,
    salt: bytes,
    subscriber_public_key: bytes,
    server_public_key: bytes,
    auth_secret: bytes,
    label: str,
) -> tuple:
    """CEK and nonce for aesgcm/aesgcm128 with literal draft labels."""
    ikm = reference_hkdf(shared_secret, auth_secret, b"Content-Encoding: auth\x00", 32)

    if label == "aesgcm128":
        key_info = b"Content-Encoding: aesgcm128"
        nonce_info = b"Content-Encoding: nonce"
    else:
        context = (
            b"P-256\x00"
            + b"\x00\x41" + subscriber_public_key
            + b"\x00\x41" + server_public_key
        )
        key_info = b"Content-Encoding: aesgcm\x00" + context
        nonce_info = b"Content-Encoding: nonce\x00" + context

    return (
        reference_hkdf(ikm, salt, key_info, 16),
        reference_hkdf(ikm, salt, nonce_info, 12),
    )
