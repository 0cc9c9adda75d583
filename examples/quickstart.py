"""aumai-sigaclient quickstart: the full hashcode signing workflow, offline.

Run this file directly to see the workflow in action:

    python examples/quickstart.py

A tiny in-process gateway stands in for SiGa so that no network access or
credentials are needed. The "external signer" is an Ed25519 key generated on
the fly, playing the part of a smart card.
"""

from __future__ import annotations

import base64
import io
import tempfile
import uuid
import zipfile
from pathlib import Path
from typing import Any

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from aumai_sigaclient import (
    ContainerType,
    DataFileDeclaration,
    FinalizationResult,
    SigaClient,
)


class DemoGateway:
    """Just enough of the gateway to drive one container end to end."""

    def __init__(self, finalize_result: str) -> None:
        self.finalize_result = finalize_result
        self.containers: dict[str, dict[str, Any]] = {}

    def create_hashcode_container(self, body: dict[str, Any]) -> dict[str, Any]:
        container_id = str(uuid.uuid4())
        self.containers[container_id] = {"dataFiles": body["dataFiles"], "signatures": []}
        return {"containerId": container_id}

    def start_signing(self, container_id: str, certificate_hex: str) -> dict[str, Any]:
        signed_info = f"<ds:SignedInfo container='{container_id}'/>".encode()
        return {
            "dataToSign": base64.b64encode(signed_info).decode("ascii"),
            "digestAlgorithm": "SHA256",
            "generatedSignatureId": "S0",
        }

    def finalize_container_remote_signing(
        self, endpoint: str, container_id: str, signature_id: str, signature_hex: str
    ) -> dict[str, Any]:
        self.containers[container_id]["signatures"].append({"id": signature_id})
        return {"result": self.finalize_result}

    def get_container_validation(self, container_id: str) -> dict[str, Any]:
        count = len(self.containers[container_id]["signatures"])
        return {"validationConclusion": {"validSignaturesCount": count, "signaturesCount": count}}

    def get_container(self, endpoint: str, container_id: str) -> dict[str, Any]:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("mimetype", "application/vnd.etsi.asic-e+zip")
            zf.writestr("META-INF/signatures0.xml", "<asic:XAdESSignatures/>")
        return {"container": base64.b64encode(buffer.getvalue()).decode("ascii")}

    def delete_container(self, container_id: str) -> None:
        del self.containers[container_id]

    def get_container_files(self, container_id: str) -> dict[str, Any]:
        return {"dataFiles": self.containers[container_id]["dataFiles"]}

    def get_container_signatures(self, container_id: str) -> dict[str, Any]:
        return {"signatures": self.containers[container_id]["signatures"]}


def demo_workflow(finalize_result: str) -> None:
    print(f"\n=== Gateway answers finalize with {finalize_result} ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        tmp = Path(tmpdir)
        contract = tmp / "contract.txt"
        contract.write_text("The parties agree.", encoding="utf-8")

        gateway = DemoGateway(finalize_result)
        client = SigaClient(gateway)  # type: ignore[arg-type]

        container_id = client.create_container(
            ContainerType.HASHCODE, [DataFileDeclaration.from_path(contract)]
        )
        print(f"Container created : {container_id}")
        print(f"Declared files    : {[f['fileName'] for f in client.get_data_files_list()]}")

        session = client.prepare_signing("3082")
        print(f"Digest algorithm  : {session.digest_algorithm}")
        print(f"Hash to sign      : {session.data_to_sign_hash}")

        signer = Ed25519PrivateKey.generate()
        signature_hex = signer.sign(session.data_to_sign_hash_bytes()).hex()

        outcome = client.finalize_signing(
            session.generated_signature_id, signature_hex, {"contract.txt": str(contract)}
        )
        print(f"Finalization      : {outcome.result.value}")

        if outcome.result is FinalizationResult.NOT_OK and outcome.archive_path:
            with zipfile.ZipFile(outcome.archive_path) as zf:
                print(f"Local archive     : {outcome.archive_path.name}")
                print(f"Archive entries   : {zf.namelist()}")
            print(f"Remote copy gone  : {container_id not in gateway.containers}")


if __name__ == "__main__":
    demo_workflow("OK")
    demo_workflow("NOT_OK")
