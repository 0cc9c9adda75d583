"""Tests for aumai_sigaclient.digest: named digest registry."""

from __future__ import annotations

import base64
import hashlib

import pytest
from cryptography.hazmat.primitives import hashes

from aumai_sigaclient import digest
from aumai_sigaclient.exceptions import UnsupportedDigestAlgorithmError

PAYLOAD = b"signed-info-bytes"


class TestResolveDigest:
    @pytest.mark.parametrize("name", ["SHA256", "sha256", "SHA-256", "sha_256", " SHA256 "])
    def test_name_variants_resolve_to_sha256(self, name: str) -> None:
        assert isinstance(digest.resolve_digest(name), hashes.SHA256)

    def test_sha3_is_not_confused_with_sha2(self) -> None:
        assert isinstance(digest.resolve_digest("SHA3-256"), hashes.SHA3_256)
        assert isinstance(digest.resolve_digest("SHA256"), hashes.SHA256)

    @pytest.mark.parametrize(
        ("name", "algorithm"),
        [
            ("SHA512/224", hashes.SHA512_224),
            ("SHA-512/224", hashes.SHA512_224),
            ("SHA512_256", hashes.SHA512_256),
            ("sha512/256", hashes.SHA512_256),
        ],
    )
    def test_truncated_sha512_variants(self, name: str, algorithm: type) -> None:
        resolved = digest.resolve_digest(name)
        assert isinstance(resolved, algorithm)
        truncated = digest.compute_digest(name, PAYLOAD)
        assert len(truncated) == resolved.digest_size
        assert truncated != digest.compute_digest("SHA512", PAYLOAD)[: resolved.digest_size]

    @pytest.mark.parametrize("name", ["MD5", "GOST3411", "", "SHA1024"])
    def test_unknown_name_raises(self, name: str) -> None:
        with pytest.raises(UnsupportedDigestAlgorithmError) as exc_info:
            digest.resolve_digest(name)
        assert "sha256" in exc_info.value.details["supported"]

    def test_builtins_listed(self) -> None:
        supported = digest.supported_digests()
        for name in ("sha1", "sha224", "sha256", "sha384", "sha512", "sha3256"):
            assert name in supported


class TestComputeDigest:
    @pytest.mark.parametrize(
        ("name", "hash_fn"),
        [
            ("SHA1", hashlib.sha1),
            ("SHA-1", hashlib.sha1),
            ("SHA224", hashlib.sha224),
            ("SHA256", hashlib.sha256),
            ("SHA384", hashlib.sha384),
            ("SHA512", hashlib.sha512),
            ("SHA3-512", hashlib.sha3_512),
        ],
    )
    def test_matches_hashlib(self, name: str, hash_fn) -> None:
        assert digest.compute_digest(name, PAYLOAD) == hash_fn(PAYLOAD).digest()

    def test_digest_b64_decodes_hashes_and_encodes(self) -> None:
        data_b64 = base64.b64encode(PAYLOAD).decode("ascii")
        expected = base64.b64encode(hashlib.sha512(PAYLOAD).digest()).decode("ascii")
        assert digest.digest_b64("SHA512", data_b64) == expected


class TestRegisterDigest:
    def test_registered_algorithm_is_resolvable(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(digest, "_REGISTRY", dict(digest._REGISTRY))
        digest.register_digest("BLAKE2b-512", lambda: hashes.BLAKE2b(64))
        assert digest.compute_digest("blake2b512", PAYLOAD) == hashlib.blake2b(
            PAYLOAD, digest_size=64
        ).digest()

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            digest.register_digest("--", lambda: hashes.SHA256())
