"""CLI entry point for aumai-sigaclient."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
import httpx
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from aumai_sigaclient.client import SigaClient
from aumai_sigaclient.config import GatewaySettings
from aumai_sigaclient.exceptions import SigaClientError, SignatureValidationError
from aumai_sigaclient.gateway import GatewayFacade, HttpGateway
from aumai_sigaclient.logging_config import configure_logging
from aumai_sigaclient.models import ContainerType, DataFileDeclaration

_HANDLED_ERRORS = (SigaClientError, httpx.HTTPError, OSError, ValueError)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_gateway() -> GatewayFacade:
    return HttpGateway(GatewaySettings())


def _client(container_id: str | None = None, output_dir: str | None = None) -> SigaClient:
    client = SigaClient(_make_gateway(), archive_dir=output_dir)
    if container_id:
        client.set_container_id(container_id)
    return client


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


def _certificate_hex(cert_hex: str | None, cert_file: str | None) -> str:
    """Return the signing certificate as DER hex from either option."""
    if cert_hex:
        return cert_hex
    if not cert_file:
        raise click.UsageError("Either --cert-hex or --cert-file is required.")
    raw = Path(cert_file).read_bytes()
    if b"-----BEGIN CERTIFICATE-----" in raw:
        certificate = x509.load_pem_x509_certificate(raw)
    else:
        certificate = x509.load_der_x509_certificate(raw)
    return certificate.public_bytes(serialization.Encoding.DER).hex()


def _parse_file_map(entries: tuple[str, ...]) -> dict[str, str]:
    files: dict[str, str] = {}
    for entry in entries:
        name, sep, path = entry.partition("=")
        if not sep:
            path = name
            name = Path(path).name
        files[name] = path
    return files


container_id_option = click.option(
    "--container-id",
    required=True,
    metavar="ID",
    help="Gateway container id.",
)

# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON.")
def main(log_level: str, json_logs: bool) -> None:
    """AumAI SigaClient: hashcode container signing against a SiGa gateway.

    Gateway settings are read from SIGA_URL, SIGA_CLIENT, SIGA_SERVICE,
    SIGA_UUID and SIGA_SECRET.
    """
    configure_logging(level=log_level, json_output=json_logs)


@main.command("create")
@click.option(
    "--file",
    "file_paths",
    multiple=True,
    required=True,
    metavar="PATH",
    help="Data file to declare (repeatable).",
)
def create_command(file_paths: tuple[str, ...]) -> None:
    """Create a hashcode container from local files."""
    try:
        declarations = [DataFileDeclaration.from_path(p) for p in file_paths]
        with _client() as client:
            container_id = client.create_container(ContainerType.HASHCODE, declarations)
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    click.echo(container_id)


@main.command("upload")
@click.argument("container_path", metavar="PATH")
def upload_command(container_path: str) -> None:
    """Upload an existing hashcode container file."""
    try:
        content = Path(container_path).read_bytes()
        with _client() as client:
            container_id = client.upload_hashcode_container(content)
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    click.echo(container_id)


@main.command("prepare")
@container_id_option
@click.option("--cert-hex", default=None, help="Signing certificate, DER as hex.")
@click.option(
    "--cert-file",
    default=None,
    metavar="PATH",
    help="Signing certificate file (PEM or DER).",
)
def prepare_command(container_id: str, cert_hex: str | None, cert_file: str | None) -> None:
    """Start remote signing and print the data to sign."""
    try:
        certificate_hex = _certificate_hex(cert_hex, cert_file)
        with _client(container_id) as client:
            session = client.prepare_signing(certificate_hex)
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    _echo_json(session.model_dump(by_alias=True))


@main.command("mobile-sign")
@container_id_option
@click.option(
    "--params",
    required=True,
    metavar="JSON",
    help='Mobile-ID request, e.g. \'{"personIdentifier": "...", "phoneNo": "..."}\'.',
)
def mobile_sign_command(container_id: str, params: str) -> None:
    """Start Mobile-ID signing."""
    try:
        with _client(container_id) as client:
            response = client.prepare_mobile_signing(json.loads(params))
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    _echo_json(response)


@main.command("mobile-status")
@container_id_option
@click.option("--signature-id", required=True, metavar="ID")
def mobile_status_command(container_id: str, signature_id: str) -> None:
    """Poll Mobile-ID signing status once."""
    try:
        with _client(container_id) as client:
            response = client.get_mobile_signing_status(signature_id)
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    _echo_json(response)


@main.command("finalize")
@container_id_option
@click.option("--signature-id", required=True, metavar="ID")
@click.option("--signature-hex", required=True, help="Signature value as hex.")
@click.option(
    "--file",
    "file_entries",
    multiple=True,
    required=True,
    metavar="NAME=PATH",
    help="Original data file, as logical name and local path (repeatable).",
)
@click.option(
    "--output-dir",
    default=None,
    metavar="DIR",
    help="Where a fallback archive is written (default: first file's directory).",
)
def finalize_command(
    container_id: str,
    signature_id: str,
    signature_hex: str,
    file_entries: tuple[str, ...],
    output_dir: str | None,
) -> None:
    """Finalize signing; package locally if the gateway does not complete it."""
    files = _parse_file_map(file_entries)
    try:
        with _client(container_id, output_dir) as client:
            outcome = client.finalize_signing(signature_id, signature_hex, files)
    except SignatureValidationError as exc:
        click.echo(f"Validation: FAILED: {exc}", err=True)
        sys.exit(2)
    except _HANDLED_ERRORS as exc:
        _fail(exc)

    click.echo(f"Result  : {outcome.result.value}")
    if outcome.archive_path is not None:
        click.echo(f"Archive : {outcome.archive_path}")


@main.command("validate")
@container_id_option
def validate_command(container_id: str) -> None:
    """Print the gateway validation conclusion."""
    try:
        with _client(container_id) as client:
            conclusion = client.get_container_validation()
    except _HANDLED_ERRORS as exc:
        _fail(exc)

    click.echo(f"Signatures : {conclusion.signatures_count}")
    click.echo(f"Valid      : {conclusion.valid_signatures_count}")
    if not conclusion.all_signatures_valid:
        click.echo("Validation: FAILED", err=True)
        sys.exit(2)
    click.echo("Validation: OK")


@main.command("datafiles")
@container_id_option
def datafiles_command(container_id: str) -> None:
    """List the container's data files."""
    try:
        with _client(container_id) as client:
            data_files = client.get_data_files_list()
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    _echo_json(data_files)


@main.command("signatures")
@container_id_option
def signatures_command(container_id: str) -> None:
    """List the container's signatures."""
    try:
        with _client(container_id) as client:
            signatures = client.get_signatures_list()
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    _echo_json(signatures)


@main.command("signature-info")
@container_id_option
@click.option("--signature-id", required=True, metavar="ID")
def signature_info_command(container_id: str, signature_id: str) -> None:
    """Show details of one signature."""
    try:
        with _client(container_id) as client:
            info = client.get_signature_info(signature_id)
    except _HANDLED_ERRORS as exc:
        _fail(exc)
    _echo_json(info)


if __name__ == "__main__":
    main()
