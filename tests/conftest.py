"""Shared test fixtures for aumai-sigaclient."""

from __future__ import annotations

import base64
import io
import zipfile
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.x509.oid import NameOID

from aumai_sigaclient.client import SigaClient

CONTAINER_ID = "b5c6e1a0-7c52-4d10-9b8a-1f1c0f4d2e11"
SIGNATURE_ID = "S0"
DATA_TO_SIGN = base64.b64encode(b"<ds:SignedInfo>to be signed</ds:SignedInfo>").decode("ascii")

BASE_ENTRIES = {
    "mimetype": b"application/vnd.etsi.asic-e+zip",
    "META-INF/manifest.xml": b"<manifest:manifest/>",
    "META-INF/hashcodes-sha256.xml": b"<hashcodes/>",
    "META-INF/signatures0.xml": b"<asic:XAdESSignatures/>",
}

# ---------------------------------------------------------------------------
# Fake gateway
# ---------------------------------------------------------------------------


class FakeGateway:
    """In-memory :class:`GatewayFacade` that records every call in order."""

    def __init__(
        self,
        container_id: str = CONTAINER_ID,
        finalize_result: str = "OK",
        valid_signatures: int = 1,
        signatures: int = 1,
        base_archive: bytes = b"",
        digest_algorithm: str = "SHA256",
    ) -> None:
        self.container_id = container_id
        self.finalize_result = finalize_result
        self.valid_signatures = valid_signatures
        self.signatures = signatures
        self.base_archive = base_archive
        self.digest_algorithm = digest_algorithm
        self.delete_error: Exception | None = None
        self.closed = False
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def close(self) -> None:
        self.closed = True

    def create_hashcode_container(self, body: dict[str, Any]) -> dict[str, Any]:
        self._record("create_hashcode_container", body)
        return {"containerId": self.container_id}

    def start_signing(self, container_id: str, certificate_hex: str) -> dict[str, Any]:
        self._record("start_signing", container_id, certificate_hex)
        return {
            "dataToSign": DATA_TO_SIGN,
            "digestAlgorithm": self.digest_algorithm,
            "generatedSignatureId": SIGNATURE_ID,
        }

    def start_mobile_signing(
        self, container_id: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        self._record("start_mobile_signing", container_id, params)
        return {"generatedSignatureId": SIGNATURE_ID, "challengeId": "0696"}

    def get_mobile_signing_status(
        self, container_id: str, signature_id: str
    ) -> dict[str, Any]:
        self._record("get_mobile_signing_status", container_id, signature_id)
        return {"midStatus": "OUTSTANDING_TRANSACTION"}

    def finalize_container_remote_signing(
        self,
        endpoint: str,
        container_id: str,
        signature_id: str,
        signature_hex: str,
    ) -> dict[str, Any]:
        self._record(
            "finalize_container_remote_signing",
            endpoint,
            container_id,
            signature_id,
            signature_hex,
        )
        return {"result": self.finalize_result}

    def get_container(self, endpoint: str, container_id: str) -> dict[str, Any]:
        self._record("get_container", endpoint, container_id)
        return {"container": base64.b64encode(self.base_archive).decode("ascii")}

    def get_container_validation(self, container_id: str) -> dict[str, Any]:
        self._record("get_container_validation", container_id)
        return {
            "validationConclusion": {
                "validSignaturesCount": self.valid_signatures,
                "signaturesCount": self.signatures,
                "policy": {"policyName": "POLv4"},
            }
        }

    def delete_container(self, container_id: str) -> None:
        self._record("delete_container", container_id)
        if self.delete_error is not None:
            raise self.delete_error

    def upload_container(self, container_b64: str) -> dict[str, Any]:
        self._record("upload_container", container_b64)
        return {"containerId": self.container_id}

    def get_container_files(self, container_id: str) -> dict[str, Any]:
        self._record("get_container_files", container_id)
        return {"dataFiles": [{"fileName": "a.txt", "fileSize": 5}]}

    def get_container_signatures(self, container_id: str) -> dict[str, Any]:
        self._record("get_container_signatures", container_id)
        return {"signatures": [{"id": SIGNATURE_ID, "signerInfo": "SERIALNUMBER=PNOEE-1"}]}

    def get_signature_info(self, container_id: str, signature_id: str) -> dict[str, Any]:
        self._record("get_signature_info", container_id, signature_id)
        return {"id": signature_id, "signatureProfile": "LT"}


# ---------------------------------------------------------------------------
# Archive fixtures
# ---------------------------------------------------------------------------


def build_base_archive(entries: dict[str, bytes] = BASE_ENTRIES) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w") as zf:
        for name, content in entries.items():
            compression = zipfile.ZIP_STORED if name == "mimetype" else zipfile.ZIP_DEFLATED
            zf.writestr(name, content, compress_type=compression)
    return buffer.getvalue()


@pytest.fixture()
def base_archive() -> bytes:
    """A minimal signed hashcode container as returned by the gateway."""
    return build_base_archive()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    """A directory holding two original data files.

    Structure:
        a.txt: b"hello"
        b.txt: b"world!"
    """
    d = tmp_path / "uploads"
    d.mkdir()
    (d / "a.txt").write_bytes(b"hello")
    (d / "b.txt").write_bytes(b"world!")
    return d


@pytest.fixture()
def file_map(data_dir: Path) -> dict[str, str]:
    return {"a.txt": str(data_dir / "a.txt"), "b.txt": str(data_dir / "b.txt")}


# ---------------------------------------------------------------------------
# Gateway / client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def gateway(base_archive: bytes) -> FakeGateway:
    return FakeGateway(base_archive=base_archive)


@pytest.fixture()
def client(gateway: FakeGateway) -> SigaClient:
    """A client with no container yet."""
    return SigaClient(gateway)


@pytest.fixture()
def created_client(client: SigaClient) -> SigaClient:
    """A client holding :data:`CONTAINER_ID`."""
    client.create_container(
        "HASHCODE", [{"name": "a.txt", "size": 5, "data": b"hello"}]
    )
    return client


# ---------------------------------------------------------------------------
# Certificate fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def signing_certificate() -> x509.Certificate:
    """A throwaway self-signed Ed25519 certificate."""
    key = Ed25519PrivateKey.generate()
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "TEST SIGNER")])
    now = datetime.now(tz=UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, algorithm=None)
    )


@pytest.fixture(scope="session")
def certificate_hex(signing_certificate: x509.Certificate) -> str:
    return signing_certificate.public_bytes(serialization.Encoding.DER).hex()
