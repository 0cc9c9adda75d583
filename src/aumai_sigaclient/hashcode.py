"""Hashcode declarations for data files sent to the gateway."""

from __future__ import annotations

import base64
import hashlib

from aumai_sigaclient.exceptions import InvalidSigaParamError
from aumai_sigaclient.models import HashcodeDataFile


def _b64(digest: bytes) -> str:
    return base64.b64encode(digest).decode("ascii")


def encode_data_file(name: str, size: int, content: bytes) -> HashcodeDataFile:
    """Build the gateway declaration for one data file.

    The file is referenced by its SHA-256 and SHA-512 digests (base64) and its
    declared size; the content itself never leaves the machine.

    Raises:
        InvalidSigaParamError: if *name*, *size* or *content* is ``None`` or
            *size* is negative.
    """
    if name is None or size is None or content is None:
        raise InvalidSigaParamError("Data file name, size and content are required")
    if size < 0:
        raise InvalidSigaParamError(
            f"Data file size must be non-negative: {size}",
            details={"file_name": name},
        )
    return HashcodeDataFile(
        file_name=name,
        file_hash_sha256=_b64(hashlib.sha256(content).digest()),
        file_hash_sha512=_b64(hashlib.sha512(content).digest()),
        file_size=size,
    )


__all__ = ["encode_data_file"]
