"""aumai-sigaclient: Hashcode container signing workflow against a SiGa gateway."""

from aumai_sigaclient.archive import ArchiveMerger
from aumai_sigaclient.client import SigaClient
from aumai_sigaclient.config import GatewaySettings
from aumai_sigaclient.exceptions import (
    ArchiveMergeError,
    ContainerIdError,
    InvalidSigaParamError,
    SigaClientError,
    SignatureValidationError,
    UnsupportedDigestAlgorithmError,
)
from aumai_sigaclient.gateway import GatewayFacade, HttpGateway
from aumai_sigaclient.hashcode import encode_data_file
from aumai_sigaclient.models import (
    ContainerType,
    DataFileDeclaration,
    FinalizationOutcome,
    FinalizationResult,
    HashcodeDataFile,
    SigningSession,
    ValidationConclusion,
    WorkflowState,
)

__version__ = "0.1.0"

__all__ = [
    "ArchiveMergeError",
    "ArchiveMerger",
    "ContainerIdError",
    "ContainerType",
    "DataFileDeclaration",
    "FinalizationOutcome",
    "FinalizationResult",
    "GatewayFacade",
    "GatewaySettings",
    "HashcodeDataFile",
    "HttpGateway",
    "InvalidSigaParamError",
    "SigaClient",
    "SigaClientError",
    "SignatureValidationError",
    "SigningSession",
    "UnsupportedDigestAlgorithmError",
    "ValidationConclusion",
    "WorkflowState",
    "encode_data_file",
]
