"""P-256 key material and ECDH key agreement."""

from typing import Callable, Optional, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .types import (
    PUBLIC_KEY_SIZE,
    PRIVATE_KEY_SIZE,
    SHARED_SECRET_SIZE,
    UnsupportedCurveError,
    KeyGenerationError,
    InvalidKeyError,
    InvalidPublicKeyError,
)

# Order of the P-256 base point
P256_ORDER = 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551

# Retries before giving up on a random source that keeps producing out-of-range scalars
_MAX_SCALAR_ATTEMPTS = 64

RandomSource = Callable[[int], bytes]


def generate_keypair(
    curve: Optional[ec.EllipticCurve] = None,
    rng: Optional[RandomSource] = None,
) -> Tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]:
    """
    Generate a fresh P-256 key pair.

    Args:
        curve: Curve to use. Only SECP256R1 is accepted.
        rng: Optional secure random source returning ``n`` bytes per call.
            When omitted the provider's own generator is used.

    Returns:
        Tuple of (private_key, public_key)

    Raises:
        UnsupportedCurveError: If the curve is not P-256 or not available.
        KeyGenerationError: If the provider or random source fails.
    """
    curve = curve or ec.SECP256R1()
    if curve.name != ec.SECP256R1.name:
        raise UnsupportedCurveError(f"Unsupported curve: {curve.name}")

    try:
        if rng is None:
            private_key = ec.generate_private_key(curve)
        else:
            private_key = ec.derive_private_key(_random_scalar(rng), curve)
    except UnsupportedAlgorithm as e:
        raise UnsupportedCurveError(f"Curve not available: {curve.name}") from e
    except (ValueError, OSError) as e:
        raise KeyGenerationError(f"Key generation failed: {e}") from e

    return private_key, private_key.public_key()


def _random_scalar(rng: RandomSource) -> int:
    """Draw a private scalar in [1, n) by rejection sampling."""
    for _ in range(_MAX_SCALAR_ATTEMPTS):
        candidate = rng(PRIVATE_KEY_SIZE)
        if len(candidate) != PRIVATE_KEY_SIZE:
            raise KeyGenerationError(
                f"Random source returned {len(candidate)} bytes, expected {PRIVATE_KEY_SIZE}"
            )
        scalar = int.from_bytes(candidate, byteorder="big")
        if 0 < scalar < P256_ORDER:
            return scalar
    raise KeyGenerationError("Random source did not produce a valid scalar")


def ecdh(
    private_key: ec.EllipticCurvePrivateKey,
    public_key: Union[ec.EllipticCurvePublicKey, bytes],
) -> bytes:
    """
    Perform P-256 ECDH key agreement.

    Args:
        private_key: Our private key
        public_key: Their public key, as a key object or 65-byte point

    Returns:
        32-byte shared secret (big-endian x-coordinate)
    """
    if isinstance(public_key, (bytes, bytearray)):
        public_key = public_key_from_bytes(bytes(public_key))

    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise InvalidKeyError("Private key is not an EC key")
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise InvalidKeyError("Public key is not an EC key")
    if private_key.curve.name != public_key.curve.name:
        raise InvalidKeyError(
            f"Curve mismatch: {private_key.curve.name} vs {public_key.curve.name}"
        )

    try:
        shared_secret = private_key.exchange(ec.ECDH(), public_key)
    except ValueError as e:
        raise InvalidKeyError(f"Key agreement failed: {e}") from e

    if len(shared_secret) != SHARED_SECRET_SIZE:
        raise InvalidKeyError(
            f"Shared secret must be {SHARED_SECRET_SIZE} bytes, got {len(shared_secret)}"
        )
    return shared_secret


def public_key_to_bytes(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Encode a public key as a 65-byte uncompressed point."""
    return public_key.public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)


def public_key_from_bytes(data: bytes) -> ec.EllipticCurvePublicKey:
    """
    Decode a 65-byte uncompressed point into a P-256 public key.

    Raises:
        InvalidPublicKeyError: If the encoding is wrong or the point is not on the curve.
    """
    if len(data) != PUBLIC_KEY_SIZE:
        raise InvalidPublicKeyError(
            f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(data)}"
        )
    if data[0] != 0x04:
        raise InvalidPublicKeyError(f"Public key is not uncompressed (tag 0x{data[0]:02x})")

    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), data)
    except ValueError as e:
        raise InvalidPublicKeyError(f"Public key is not on P-256: {e}") from e


def private_key_to_bytes(private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Encode a private key as its 32-byte big-endian scalar."""
    return private_key.private_numbers().private_value.to_bytes(PRIVATE_KEY_SIZE, byteorder="big")


def private_key_from_bytes(data: bytes) -> ec.EllipticCurvePrivateKey:
    """Create a P-256 private key from a 32-byte big-endian scalar."""
    if len(data) != PRIVATE_KEY_SIZE:
        raise InvalidKeyError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(data)}")

    scalar = int.from_bytes(data, byteorder="big")
    if not 0 < scalar < P256_ORDER:
        raise InvalidKeyError("Private key scalar out of range")
    return ec.derive_private_key(scalar, ec.SECP256R1())
