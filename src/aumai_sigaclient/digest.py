"""Named digest algorithms for computing the to-be-signed hash.

The gateway tells the client which hash function to apply to ``dataToSign``;
this module resolves that name to a :mod:`cryptography` hash algorithm.
"""

from __future__ import annotations

import base64
from collections.abc import Callable

from cryptography.hazmat.primitives import hashes

from aumai_sigaclient.exceptions import UnsupportedDigestAlgorithmError

DigestFactory = Callable[[], hashes.HashAlgorithm]

_REGISTRY: dict[str, DigestFactory] = {}


def _normalise(name: str) -> str:
    return name.strip().lower().replace("-", "").replace("_", "")


def register_digest(name: str, factory: DigestFactory) -> None:
    """Register *factory* under *name*, replacing any previous entry."""
    key = _normalise(name)
    if not key:
        raise ValueError("Digest algorithm name must not be empty")
    _REGISTRY[key] = factory


def supported_digests() -> list[str]:
    """Return the normalised names of all registered algorithms."""
    return sorted(_REGISTRY)


def resolve_digest(name: str) -> hashes.HashAlgorithm:
    """Return a fresh hash algorithm instance for *name*.

    Raises:
        UnsupportedDigestAlgorithmError: if *name* is not registered.
    """
    factory = _REGISTRY.get(_normalise(name or ""))
    if factory is None:
        raise UnsupportedDigestAlgorithmError(
            f"Unsupported digest algorithm: {name!r}",
            details={"algorithm": name, "supported": supported_digests()},
        )
    return factory()


def compute_digest(name: str, data: bytes) -> bytes:
    """Hash *data* with the algorithm registered under *name*."""
    hasher = hashes.Hash(resolve_digest(name))
    hasher.update(data)
    return hasher.finalize()


def digest_b64(name: str, data_b64: str) -> str:
    """Decode base64 *data_b64*, hash it and return the digest as base64."""
    digest = compute_digest(name, base64.b64decode(data_b64))
    return base64.b64encode(digest).decode("ascii")


for _name, _factory in (
    ("SHA1", hashes.SHA1),
    ("SHA224", hashes.SHA224),
    ("SHA256", hashes.SHA256),
    ("SHA384", hashes.SHA384),
    ("SHA512", hashes.SHA512),
    ("SHA512/224", hashes.SHA512_224),
    ("SHA512-224", hashes.SHA512_224),
    ("SHA512/256", hashes.SHA512_256),
    ("SHA512-256", hashes.SHA512_256),
    ("SHA3-224", hashes.SHA3_224),
    ("SHA3-256", hashes.SHA3_256),
    ("SHA3-384", hashes.SHA3_384),
    ("SHA3-512", hashes.SHA3_512),
):
    register_digest(_name, _factory)


__all__ = [
    "compute_digest",
    "digest_b64",
    "register_digest",
    "resolve_digest",
    "supported_digests",
]
