"""Exceptions raised by aumai-sigaclient.

Exception Hierarchy:
    SigaClientError (base)
    ├── InvalidSigaParamError
    ├── ContainerIdError
    ├── SignatureValidationError
    ├── UnsupportedDigestAlgorithmError
    └── ArchiveMergeError

Gateway transport failures are raised as the underlying ``httpx`` errors and
are not wrapped.
"""

from __future__ import annotations

from typing import Any


class SigaClientError(Exception):
    """Base exception for all aumai-sigaclient errors.

    Attributes:
        message: Descriptive error message
        error_code: Machine-readable error identifier
        details: Additional context about the error
    """

    default_message = "SiGa client error"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a JSON-friendly dictionary."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details if self.details else None,
        }


class InvalidSigaParamError(SigaClientError):
    """An argument was rejected before reaching the gateway."""

    default_message = "Invalid SiGa parameter"


class ContainerIdError(SigaClientError):
    """An operation needs a container id but none has been created or uploaded."""

    default_message = "Container id is missing; create or upload a container first"


class SignatureValidationError(SigaClientError):
    """The gateway validation report counts at least one invalid signature."""

    default_message = "One of signatures is not valid!"


class UnsupportedDigestAlgorithmError(SigaClientError):
    """The gateway asked for a digest algorithm that is not registered."""

    default_message = "Unsupported digest algorithm"


class ArchiveMergeError(SigaClientError):
    """Writing or extending the local signed archive failed."""

    default_message = "Failed to build the signed archive"


__all__ = [
    "ArchiveMergeError",
    "ContainerIdError",
    "InvalidSigaParamError",
    "SigaClientError",
    "SignatureValidationError",
    "UnsupportedDigestAlgorithmError",
]
