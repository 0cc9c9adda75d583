"""Signing workflow for SiGa hashcode containers."""

from __future__ import annotations

import base64
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from aumai_sigaclient.archive import ArchiveMerger
from aumai_sigaclient.config import GatewaySettings
from aumai_sigaclient.digest import digest_b64
from aumai_sigaclient.exceptions import (
    ContainerIdError,
    InvalidSigaParamError,
    SignatureValidationError,
)
from aumai_sigaclient.gateway import HASHCODE_ENDPOINT, GatewayFacade, HttpGateway
from aumai_sigaclient.hashcode import encode_data_file
from aumai_sigaclient.models import (
    ContainerType,
    DataFileDeclaration,
    FinalizationOutcome,
    FinalizationResult,
    SigningSession,
    ValidationConclusion,
    WorkflowState,
)

logger = structlog.get_logger(__name__)

FileMap = Mapping[str, str | Path]


def _as_declaration(file: DataFileDeclaration | Mapping[str, Any]) -> DataFileDeclaration:
    if isinstance(file, DataFileDeclaration):
        return file
    try:
        return DataFileDeclaration.model_validate(dict(file))
    except ValidationError as exc:
        raise InvalidSigaParamError(
            f"Invalid data file declaration: {exc}",
            details={"file_name": dict(file).get("name")},
        ) from exc


def _require_hex(value: str, what: str) -> None:
    try:
        bytes.fromhex(value)
    except (TypeError, ValueError) as exc:
        raise InvalidSigaParamError(f"{what} must be a hex string") from exc


class SigaClient:
    """Drive one hashcode container through create, sign and finalize.

    A client holds a single container id. It is not safe to share between
    threads or between concurrent signing sessions; use one client per
    container.
    """

    def __init__(
        self,
        gateway: GatewayFacade,
        archive_dir: str | Path | None = None,
    ) -> None:
        self._gateway = gateway
        self._merger = ArchiveMerger(archive_dir)
        self._container_id: str | None = None
        self._state = WorkflowState.UNINITIALIZED

    @classmethod
    def create(
        cls,
        options: Mapping[str, Any] | GatewaySettings | None = None,
        auth: httpx.Auth | None = None,
        archive_dir: str | Path | None = None,
    ) -> SigaClient:
        """Build a client talking HTTP to the gateway described by *options*.

        Args:
            options: ``{url, client, service, uuid, secret}`` or
                :class:`GatewaySettings`; ``None`` reads ``SIGA_*`` env vars.
            auth: Request-authentication hook passed to ``httpx``.
            archive_dir: Where fallback archives are written.
        """
        if isinstance(options, GatewaySettings):
            settings = options
        else:
            settings = GatewaySettings.from_options(options or {})
        return cls(HttpGateway(settings, auth=auth), archive_dir=archive_dir)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the gateway if it holds resources such as an HTTP client."""
        close = getattr(self._gateway, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> SigaClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def container_id(self) -> str | None:
        return self._container_id

    @property
    def state(self) -> WorkflowState:
        return self._state

    def set_container_id(self, container_id: str) -> None:
        """Resume the workflow for a container that already exists on the gateway."""
        if not container_id:
            raise InvalidSigaParamError("Container id must not be empty")
        self._container_id = container_id
        self._state = WorkflowState.CREATED

    def _require_container_id(self) -> str:
        if not self._container_id:
            raise ContainerIdError()
        return self._container_id

    # ------------------------------------------------------------------
    # Container creation
    # ------------------------------------------------------------------

    def create_container(
        self,
        container_type: ContainerType | str,
        files: Iterable[DataFileDeclaration | Mapping[str, Any]],
    ) -> str:
        """Declare *files* to the gateway and remember the new container id.

        Raises:
            InvalidSigaParamError: for any type other than ``HASHCODE``, a
                malformed file entry, or duplicate file names.
        """
        if container_type != ContainerType.HASHCODE:
            raise InvalidSigaParamError(
                "Unknown container type", details={"container_type": str(container_type)}
            )
        return self._create_hashcode_container(files)

    def _create_hashcode_container(
        self, files: Iterable[DataFileDeclaration | Mapping[str, Any]]
    ) -> str:
        declarations = [_as_declaration(f) for f in files]

        names = [d.name for d in declarations]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidSigaParamError(
                "Duplicate data file names", details={"duplicates": duplicates}
            )

        data_files = [
            encode_data_file(d.name, d.size, d.content).model_dump(by_alias=True)
            for d in declarations
        ]
        response = self._gateway.create_hashcode_container({"dataFiles": data_files})

        self._container_id = response["containerId"]
        self._state = WorkflowState.CREATED
        logger.info(
            "siga.container_created",
            container_id=self._container_id,
            data_files=len(data_files),
        )
        return self._container_id

    def upload_hashcode_container(self, content: bytes | str) -> str:
        """Upload an existing hashcode container and adopt its id.

        *content* is the raw container (``bytes``) or its base64 text (``str``).
        """
        if isinstance(content, bytes):
            container_b64 = base64.b64encode(content).decode("ascii")
        else:
            container_b64 = content

        response = self._gateway.upload_container(container_b64)

        self._container_id = response["containerId"]
        self._state = WorkflowState.UPLOADED
        logger.info("siga.container_uploaded", container_id=self._container_id)
        return self._container_id

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def prepare_signing(self, certificate_hex: str) -> SigningSession:
        """Start remote signing and compute the hash the external signer must sign.

        The digest algorithm is whatever the gateway names in its response.

        Raises:
            ContainerIdError: if no container has been created or uploaded.
            UnsupportedDigestAlgorithmError: if the gateway names an unknown
                digest algorithm.
        """
        container_id = self._require_container_id()
        _require_hex(certificate_hex, "Certificate")

        response = self._gateway.start_signing(container_id, certificate_hex)
        session = SigningSession(
            data_to_sign=response["dataToSign"],
            data_to_sign_hash=digest_b64(response["digestAlgorithm"], response["dataToSign"]),
            digest_algorithm=response["digestAlgorithm"],
            generated_signature_id=response["generatedSignatureId"],
        )

        self._state = WorkflowState.SIGNING_PREPARED
        logger.info(
            "siga.signing_prepared",
            container_id=container_id,
            signature_id=session.generated_signature_id,
            digest_algorithm=session.digest_algorithm,
        )
        return session

    def prepare_mobile_signing(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Start Mobile-ID signing; the response is returned unchanged."""
        container_id = self._require_container_id()
        response = self._gateway.start_mobile_signing(container_id, dict(params))
        self._state = WorkflowState.SIGNING_PREPARED
        return response

    def get_mobile_signing_status(self, signature_id: str) -> dict[str, Any]:
        """Poll Mobile-ID signing status once. Callers own the polling loop."""
        container_id = self._require_container_id()
        return self._gateway.get_mobile_signing_status(container_id, signature_id)

    def finalize_signing(
        self, signature_id: str, signature_hex: str, files: FileMap
    ) -> FinalizationOutcome:
        """Submit the external signature value to the gateway.

        If the gateway does not answer ``OK``, :meth:`end_container_flow` runs
        once with *files* and its archive path is returned in the outcome.
        The archive location is resolved before the gateway is contacted.
        """
        container_id = self._require_container_id()
        _require_hex(signature_hex, "Signature")
        self._merger.archive_path(container_id, files)

        response = self._gateway.finalize_container_remote_signing(
            HASHCODE_ENDPOINT, container_id, signature_id, signature_hex
        )
        result = FinalizationResult.from_gateway(response.get("result"))

        if result is FinalizationResult.OK:
            self._state = WorkflowState.FINALIZED
            logger.info(
                "siga.signing_finalized",
                container_id=container_id,
                signature_id=signature_id,
            )
            return FinalizationOutcome(result=result)

        logger.warning(
            "siga.finalize_fallback",
            container_id=container_id,
            signature_id=signature_id,
            gateway_result=response.get("result"),
        )
        archive_path = self.end_container_flow(files)
        return FinalizationOutcome(result=result, archive_path=archive_path)

    # ------------------------------------------------------------------
    # End of flow
    # ------------------------------------------------------------------

    def end_container_flow(self, files: FileMap) -> Path:
        """Validate, fetch, package locally, then delete the remote container.

        Steps run in that order and stop at the first failure. A failing
        delete is re-raised, but the archive has already been written.

        Returns:
            Path of the signed archive.
        """
        container_id = self._require_container_id()
        target = self._merger.archive_path(container_id, files)

        self._do_container_validation()

        container = self._gateway.get_container(HASHCODE_ENDPOINT, container_id)
        archive_path = self._merger.merge(
            container_id, base64.b64decode(container["container"]), files, target=target
        )

        try:
            self._gateway.delete_container(container_id)
        except Exception as exc:
            logger.error(
                "siga.delete_failed",
                container_id=container_id,
                archive=str(archive_path),
                error=str(exc),
            )
            raise

        self._container_id = None
        self._state = WorkflowState.FINALIZED_FALLBACK
        logger.info(
            "siga.container_flow_ended",
            container_id=container_id,
            archive=str(archive_path),
        )
        return archive_path

    def _do_container_validation(self) -> None:
        conclusion = self.get_container_validation()
        if not conclusion.all_signatures_valid:
            raise SignatureValidationError(
                details={
                    "container_id": self._container_id,
                    "valid_signatures_count": conclusion.valid_signatures_count,
                    "signatures_count": conclusion.signatures_count,
                }
            )

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_container_validation(self) -> ValidationConclusion:
        container_id = self._require_container_id()
        response = self._gateway.get_container_validation(container_id)
        return ValidationConclusion.model_validate(response["validationConclusion"])

    def get_data_files_list(self) -> list[dict[str, Any]]:
        container_id = self._require_container_id()
        return self._gateway.get_container_files(container_id)["dataFiles"]

    def get_signatures_list(self) -> list[dict[str, Any]]:
        container_id = self._require_container_id()
        return self._gateway.get_container_signatures(container_id)["signatures"]

    def get_signature_info(self, signature_id: str) -> dict[str, Any]:
        container_id = self._require_container_id()
        return self._gateway.get_signature_info(container_id, signature_id)


__all__ = ["SigaClient"]
