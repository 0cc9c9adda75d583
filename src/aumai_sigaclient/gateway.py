"""Gateway facade for the SiGa hashcode container REST API."""

from __future__ import annotations

import base64
from typing import Any, Protocol, runtime_checkable

import httpx
import structlog

from aumai_sigaclient.config import GatewaySettings

logger = structlog.get_logger(__name__)

HASHCODE_ENDPOINT = "hashcodecontainers"
RESULT_OK = "OK"
DEFAULT_SIGNATURE_PROFILE = "LT"


@runtime_checkable
class GatewayFacade(Protocol):
    """Remote operations the signing workflow depends on.

    Every method returns the decoded JSON response envelope unchanged.
    """

    def create_hashcode_container(self, body: dict[str, Any]) -> dict[str, Any]: ...

    def start_signing(self, container_id: str, certificate_hex: str) -> dict[str, Any]: ...

    def start_mobile_signing(
        self, container_id: str, params: dict[str, Any]
    ) -> dict[str, Any]: ...

    def get_mobile_signing_status(
        self, container_id: str, signature_id: str
    ) -> dict[str, Any]: ...

    def finalize_container_remote_signing(
        self,
        endpoint: str,
        container_id: str,
        signature_id: str,
        signature_hex: str,
    ) -> dict[str, Any]: ...

    def get_container(self, endpoint: str, container_id: str) -> dict[str, Any]: ...

    def get_container_validation(self, container_id: str) -> dict[str, Any]: ...

    def delete_container(self, container_id: str) -> None: ...

    def upload_container(self, container_b64: str) -> dict[str, Any]: ...

    def get_container_files(self, container_id: str) -> dict[str, Any]: ...

    def get_container_signatures(self, container_id: str) -> dict[str, Any]: ...

    def get_signature_info(
        self, container_id: str, signature_id: str
    ) -> dict[str, Any]: ...


def _hex_to_b64(value: str) -> str:
    return base64.b64encode(bytes.fromhex(value)).decode("ascii")


class HttpGateway:
    """Synchronous :mod:`httpx` implementation of :class:`GatewayFacade`.

    Request authentication is supplied by the caller as an ``httpx.Auth``;
    transport errors propagate unchanged and nothing is retried.
    """

    def __init__(
        self,
        settings: GatewaySettings | None = None,
        auth: httpx.Auth | None = None,
        client: httpx.Client | None = None,
        signature_profile: str = DEFAULT_SIGNATURE_PROFILE,
    ) -> None:
        self.settings = settings or GatewaySettings()
        self.signature_profile = signature_profile
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=self.settings.url.rstrip("/"),
            auth=auth,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
            headers={"Content-Type": "application/json; charset=utf-8"},
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpGateway:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "siga.gateway_status_error",
                method=method,
                path=path,
                status_code=exc.response.status_code,
                detail=exc.response.text if exc.response.content else str(exc),
            )
            raise
        except httpx.HTTPError as exc:
            logger.error(
                "siga.gateway_transport_error",
                method=method,
                path=path,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise

        if not response.content:
            return {}
        return response.json()

    # ------------------------------------------------------------------
    # Container operations
    # ------------------------------------------------------------------

    def create_hashcode_container(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/{HASHCODE_ENDPOINT}", body)

    def upload_container(self, container_b64: str) -> dict[str, Any]:
        return self._request(
            "POST", f"/upload/{HASHCODE_ENDPOINT}", {"container": container_b64}
        )

    def get_container(self, endpoint: str, container_id: str) -> dict[str, Any]:
        return self._request("GET", f"/{endpoint}/{container_id}")

    def delete_container(self, container_id: str) -> None:
        self._request("DELETE", f"/{HASHCODE_ENDPOINT}/{container_id}")

    def get_container_validation(self, container_id: str) -> dict[str, Any]:
        return self._request(
            "GET", f"/{HASHCODE_ENDPOINT}/{container_id}/validationreport"
        )

    def get_container_files(self, container_id: str) -> dict[str, Any]:
        return self._request("GET", f"/{HASHCODE_ENDPOINT}/{container_id}/datafiles")

    def get_container_signatures(self, container_id: str) -> dict[str, Any]:
        return self._request("GET", f"/{HASHCODE_ENDPOINT}/{container_id}/signatures")

    def get_signature_info(
        self, container_id: str, signature_id: str
    ) -> dict[str, Any]:
        return self._request(
            "GET", f"/{HASHCODE_ENDPOINT}/{container_id}/signatures/{signature_id}"
        )

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def start_signing(self, container_id: str, certificate_hex: str) -> dict[str, Any]:
        """Start remote signing; the certificate is sent as base64 DER."""
        return self._request(
            "POST",
            f"/{HASHCODE_ENDPOINT}/{container_id}/remotesigning",
            {
                "signingCertificate": _hex_to_b64(certificate_hex),
                "signatureProfile": self.signature_profile,
            },
        )

    def finalize_container_remote_signing(
        self,
        endpoint: str,
        container_id: str,
        signature_id: str,
        signature_hex: str,
    ) -> dict[str, Any]:
        return self._request(
            "PUT",
            f"/{endpoint}/{container_id}/remotesigning/{signature_id}",
            {"signatureValue": _hex_to_b64(signature_hex)},
        )

    def start_mobile_signing(
        self, container_id: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        body = {"signatureProfile": self.signature_profile, **params}
        return self._request(
            "POST", f"/{HASHCODE_ENDPOINT}/{container_id}/mobileidsigning", body
        )

    def get_mobile_signing_status(
        self, container_id: str, signature_id: str
    ) -> dict[str, Any]:
        return self._request(
            "GET",
            f"/{HASHCODE_ENDPOINT}/{container_id}/mobileidsigning/{signature_id}/status",
        )


__all__ = [
    "DEFAULT_SIGNATURE_PROFILE",
    "HASHCODE_ENDPOINT",
    "RESULT_OK",
    "GatewayFacade",
    "HttpGateway",
]
