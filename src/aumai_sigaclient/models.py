"""Pydantic models for aumai-sigaclient."""

from __future__ import annotations

import base64
from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ContainerType(str, Enum):
    """Container types known to the SiGa gateway."""

    HASHCODE = "HASHCODE"
    ASIC = "ASIC"


class WorkflowState(str, Enum):
    """Where a :class:`~aumai_sigaclient.client.SigaClient` is in its signing workflow."""

    UNINITIALIZED = "UNINITIALIZED"
    CREATED = "CREATED"
    UPLOADED = "UPLOADED"
    SIGNING_PREPARED = "SIGNING_PREPARED"
    FINALIZED = "FINALIZED"
    FINALIZED_FALLBACK = "FINALIZED_FALLBACK"


class FinalizationResult(str, Enum):
    """Outcome of the gateway's finalize call."""

    OK = "OK"
    NOT_OK = "NOT_OK"

    @classmethod
    def from_gateway(cls, value: object) -> FinalizationResult:
        """Anything other than the literal ``"OK"`` counts as ``NOT_OK``."""
        return cls.OK if value == cls.OK.value else cls.NOT_OK


class DataFileDeclaration(BaseModel):
    """A local data file to be declared to the gateway by its hashes."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    size: int = Field(ge=0)
    content: bytes = Field(validation_alias=AliasChoices("content", "data"))

    @classmethod
    def from_path(cls, path: str | Path, name: str | None = None) -> DataFileDeclaration:
        """Read *path* and declare it under *name* (defaults to the file name)."""
        file_path = Path(path)
        content = file_path.read_bytes()
        return cls(name=name or file_path.name, size=len(content), content=content)


class HashcodeDataFile(BaseModel):
    """Declaration record sent to the gateway for one hashcode data file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_name: str = Field(alias="fileName")
    file_hash_sha256: str = Field(alias="fileHashSha256")
    file_hash_sha512: str = Field(alias="fileHashSha512")
    file_size: int = Field(alias="fileSize", ge=0)


class SigningSession(BaseModel):
    """Material returned by prepare-signing, handed to the external signer."""

    model_config = ConfigDict(populate_by_name=True)

    data_to_sign: str = Field(alias="dataToSign")  # base64
    data_to_sign_hash: str = Field(alias="dataToSignHash")  # base64
    digest_algorithm: str = Field(alias="digestAlgorithm")
    generated_signature_id: str = Field(alias="generatedSignatureId")

    def data_to_sign_bytes(self) -> bytes:
        return base64.b64decode(self.data_to_sign)

    def data_to_sign_hash_bytes(self) -> bytes:
        return base64.b64decode(self.data_to_sign_hash)


class ValidationConclusion(BaseModel):
    """Signature counts from the gateway validation report.

    Any other report fields are kept as extra attributes.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    valid_signatures_count: int = Field(alias="validSignaturesCount", default=0)
    signatures_count: int = Field(alias="signaturesCount", default=0)

    @property
    def all_signatures_valid(self) -> bool:
        return self.valid_signatures_count == self.signatures_count


class FinalizationOutcome(BaseModel):
    """Result of :meth:`SigaClient.finalize_signing`.

    ``archive_path`` is only set when the fallback flow wrote a local archive.
    """

    result: FinalizationResult
    archive_path: Path | None = None


__all__ = [
    "ContainerType",
    "DataFileDeclaration",
    "FinalizationOutcome",
    "FinalizationResult",
    "HashcodeDataFile",
    "SigningSession",
    "ValidationConclusion",
    "WorkflowState",
]
