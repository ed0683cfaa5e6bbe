"""Tests for P-256 key material and ECDH."""

import pytest
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec

from webpush.keys import (
    generate_keypair,
    ecdh,
    public_key_to_bytes,
    public_key_from_bytes,
    private_key_to_bytes,
    private_key_from_bytes,
)
from webpush.types import (
    UnsupportedCurveError,
    KeyGenerationError,
    InvalidKeyError,
    InvalidPublicKeyError,
)
from .test_vectors import (
    RFC8291_AS_PRIVATE,
    RFC8291_AS_PUBLIC,
    RFC8291_UA_PRIVATE,
    RFC8291_UA_PUBLIC,
    SeededRandom,
)


class TestKeyGeneration:
    """Test P-256 key pair generation."""

    def test_generate_keypair(self) -> None:
        """Generated public key is a 65-byte uncompressed point."""
        private_key, public_key = generate_keypair()

        public_bytes = public_key_to_bytes(public_key)
        assert len(public_bytes) == 65
        assert public_bytes[0] == 0x04
        assert public_key_to_bytes(private_key.public_key()) == public_bytes

    def test_fresh_keys_each_call(self) -> None:
        """Two calls never return the same key."""
        _, first = generate_keypair()
        _, second = generate_keypair()

        assert public_key_to_bytes(first) != public_key_to_bytes(second)

    def test_unsupported_curve(self) -> None:
        """Only P-256 is accepted."""
        with pytest.raises(UnsupportedCurveError, match="secp384r1"):
            generate_keypair(curve=ec.SECP384R1())

    def test_provider_without_curve(self, monkeypatch) -> None:
        """A provider that lacks P-256 surfaces as UnsupportedCurveError."""
        def unavailable(curve, *args, **kwargs):
            raise UnsupportedAlgorithm("curve not supported by this backend")

        monkeypatch.setattr(ec, "generate_private_key", unavailable)

        with pytest.raises(UnsupportedCurveError, match="not available") as exc_info:
            generate_keypair()
        assert isinstance(exc_info.value.__cause__, UnsupportedAlgorithm)

    def test_provider_failure(self, monkeypatch) -> None:
        """Provider errors during generation surface as KeyGenerationError."""
        def failing(curve, *args, **kwargs):
            raise OSError("entropy source unavailable")

        monkeypatch.setattr(ec, "generate_private_key", failing)

        with pytest.raises(KeyGenerationError, match="entropy"):
            generate_keypair()

    def test_seeded_generation_is_deterministic(self) -> None:
        """Same seeded source yields the same key pair."""
        _, first = generate_keypair(rng=SeededRandom(b"seed"))
        _, second = generate_keypair(rng=SeededRandom(b"seed"))
        _, other = generate_keypair(rng=SeededRandom(b"other"))

        assert public_key_to_bytes(first) == public_key_to_bytes(second)
        assert public_key_to_bytes(first) != public_key_to_bytes(other)

    def test_short_random_source(self) -> None:
        """A source returning the wrong length is a generation failure."""
        with pytest.raises(KeyGenerationError, match="expected 32"):
            generate_keypair(rng=lambda n: b"\x01" * (n - 1))

    def test_out_of_range_random_source(self) -> None:
        """A source that only produces zero scalars eventually gives up."""
        with pytest.raises(KeyGenerationError, match="valid scalar"):
            generate_keypair(rng=lambda n: bytes(n))


class TestKeyEncoding:
    """Test public and private key encodings."""

    def test_public_key_round_trip(self) -> None:
        """Decoding an encoded key gives the same point."""
        _, public_key = generate_keypair()
        encoded = public_key_to_bytes(public_key)

        assert public_key_to_bytes(public_key_from_bytes(encoded)) == encoded

    def test_rfc8291_key_pairs(self) -> None:
        """RFC 8291 private keys derive the published public keys."""
        as_private = private_key_from_bytes(RFC8291_AS_PRIVATE)
        ua_private = private_key_from_bytes(RFC8291_UA_PRIVATE)

        assert public_key_to_bytes(as_private.public_key()) == RFC8291_AS_PUBLIC
        assert public_key_to_bytes(ua_private.public_key()) == RFC8291_UA_PUBLIC
        assert private_key_to_bytes(as_private) == RFC8291_AS_PRIVATE

    def test_public_key_wrong_length(self) -> None:
        """Reject points that are not 65 bytes."""
        with pytest.raises(InvalidPublicKeyError, match="65 bytes"):
            public_key_from_bytes(RFC8291_UA_PUBLIC[:33])

    def test_public_key_compressed_tag(self) -> None:
        """Reject points without the uncompressed tag."""
        with pytest.raises(InvalidPublicKeyError, match="uncompressed"):
            public_key_from_bytes(b"\x02" + RFC8291_UA_PUBLIC[1:])

    def test_public_key_not_on_curve(self) -> None:
        """Reject points that are not on P-256."""
        with pytest.raises(InvalidPublicKeyError, match="not on P-256"):
            public_key_from_bytes(b"\x04" + bytes(64))

    def test_private_key_invalid(self) -> None:
        """Reject malformed private scalars."""
        with pytest.raises(InvalidKeyError, match="32 bytes"):
            private_key_from_bytes(b"short")

        with pytest.raises(InvalidKeyError, match="out of range"):
            private_key_from_bytes(bytes(32))


class TestKeyAgreement:
    """Test ECDH shared secret computation."""

    def test_shared_secret_matches(self) -> None:
        """Both sides compute the same 32-byte secret."""
        alice_private, alice_public = generate_keypair()
        bob_private, bob_public = generate_keypair()

        secret = ecdh(alice_private, bob_public)

        assert len(secret) == 32
        assert secret == ecdh(bob_private, alice_public)

    def test_accepts_encoded_point(self) -> None:
        """The peer key may be passed as its 65-byte encoding."""
        alice_private, _ = generate_keypair()
        _, bob_public = generate_keypair()

        assert ecdh(alice_private, public_key_to_bytes(bob_public)) == ecdh(alice_private, bob_public)

    def test_invalid_encoded_point(self) -> None:
        """A malformed peer point is rejected."""
        private_key, _ = generate_keypair()

        with pytest.raises(InvalidPublicKeyError):
            ecdh(private_key, b"\x04" + bytes(64))

    def test_curve_mismatch(self) -> None:
        """Keys on different curves are rejected."""
        private_key, _ = generate_keypair()
        other = ec.generate_private_key(ec.SECP384R1()).public_key()

        with pytest.raises(InvalidKeyError, match="Curve mismatch"):
            ecdh(private_key, other)
