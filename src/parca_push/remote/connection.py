"""Build the gRPC channel to the remote profile store."""

from __future__ import annotations

import asyncio
import logging
import ssl
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import grpc
from cryptography import x509
from cryptography.x509.oid import NameOID

from ..core.errors import ConnectionSetupError, TokenFileError
from ..core.types import RemoteStoreConfig
from .metrics import ClientMetrics, MetricsInterceptor

logger = logging.getLogger(__name__)

_DEFAULT_TLS_PORT = 443
CERTIFICATE_FETCH_TIMEOUT = 10.0


class BearerToken(grpc.AuthMetadataPlugin):
    """Per-request credential sending ``authorization: Bearer <token>``."""

    def __init__(self, token: str, *, insecure: bool) -> None:
        self._token = token
        self._insecure = insecure

    def metadata(self) -> Tuple[Tuple[str, str], ...]:
        return (("authorization", f"Bearer {self._token}"),)

    def require_transport_security(self) -> bool:
        return not self._insecure

    def __call__(self, context, callback) -> None:
        callback(self.metadata(), None)


class BearerTokenInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    """Attach a bearer token on plaintext channels, where call credentials are refused."""

    def __init__(self, token: BearerToken) -> None:
        self._token = token

    async def intercept_unary_unary(self, continuation, client_call_details, request):
        metadata = grpc.aio.Metadata()
        if client_call_details.metadata is not None:
            for key, value in client_call_details.metadata:
                metadata.add(key, value)
        for key, value in self._token.metadata():
            metadata.add(key, value)

        details = grpc.aio.ClientCallDetails(
            method=client_call_details.method,
            timeout=client_call_details.timeout,
            metadata=metadata,
            credentials=client_call_details.credentials,
            wait_for_ready=client_call_details.wait_for_ready,
        )
        return await continuation(details, request)


def resolve_bearer_token(remote_store: RemoteStoreConfig) -> Optional[str]:
    """Return the configured token, reading the token file when one is given."""
    if remote_store.bearer_token:
        return remote_store.bearer_token
    if not remote_store.bearer_token_file:
        return None
    try:
        content = Path(remote_store.bearer_token_file).read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise TokenFileError(f"failed to read bearer token from file: {exc}") from exc
    return content.rstrip()


async def build_channel(remote_store: RemoteStoreConfig, metrics: ClientMetrics) -> grpc.aio.Channel:
    """Create a channel to ``remote_store.address``.

    The channel connects lazily: an unreachable address is reported by the
    first call made through it. With ``insecure_skip_verify`` the server
    certificate is fetched first, which is the only network I/O done here.
    """
    token_value = resolve_bearer_token(remote_store)
    token = BearerToken(token_value, insecure=remote_store.insecure) if token_value else None

    interceptors: list[grpc.aio.ClientInterceptor] = [MetricsInterceptor(metrics)]
    if token is not None and not token.require_transport_security():
        interceptors.append(BearerTokenInterceptor(token))

    if remote_store.insecure:
        logger.debug("Dialing %s over plaintext", remote_store.address)
        try:
            return grpc.aio.insecure_channel(remote_store.address, interceptors=interceptors)
        except (ValueError, TypeError) as exc:
            raise ConnectionSetupError(f"create gRPC connection: {exc}") from exc

    options: list[tuple[str, str]] = []
    if remote_store.insecure_skip_verify:
        credentials, target_name = await _pinned_credentials(remote_store.address)
        if target_name:
            options.append(("grpc.ssl_target_name_override", target_name))
    else:
        credentials = grpc.ssl_channel_credentials()

    if token is not None and token.require_transport_security():
        credentials = grpc.composite_channel_credentials(
            credentials,
            grpc.metadata_call_credentials(token, name="bearer-token"),
        )
    logger.debug("Dialing %s over TLS", remote_store.address)
    try:
        return grpc.aio.secure_channel(
            remote_store.address, credentials, options=options, interceptors=interceptors
        )
    except (ValueError, TypeError) as exc:
        raise ConnectionSetupError(f"create gRPC connection: {exc}") from exc


async def _pinned_credentials(address: str) -> Tuple[grpc.ChannelCredentials, Optional[str]]:
    # gRPC has no switch to turn verification off: trust the presented
    # certificate and check the name against one the certificate carries.
    host, port = split_host_port(address)
    der = await fetch_server_certificate(host, port)
    names = certificate_names(der)
    logger.warning("Skipping TLS certificate verification for %s", address)
    credentials = grpc.ssl_channel_credentials(root_certificates=ssl.DER_cert_to_PEM_cert(der).encode())
    return credentials, pick_target_name(names)


async def fetch_server_certificate(
    host: str, port: int, timeout: float = CERTIFICATE_FETCH_TIMEOUT
) -> bytes:
    """Return the DER certificate ``host:port`` presents, without verifying it."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.set_alpn_protocols(["h2"])
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port, ssl=context, server_hostname=host),
            timeout,
        )
    except asyncio.TimeoutError as exc:
        raise ConnectionSetupError(
            f"create gRPC connection: fetch certificate from {host}:{port}: timed out after {timeout}s"
        ) from exc
    except OSError as exc:
        raise ConnectionSetupError(
            f"create gRPC connection: fetch certificate from {host}:{port}: {exc}"
        ) from exc

    try:
        der = writer.get_extra_info("ssl_object").getpeercert(binary_form=True)
    finally:
        writer.close()
    if not der:
        raise ConnectionSetupError(f"create gRPC connection: {host}:{port} presented no certificate")
    return der


def certificate_names(der: bytes) -> List[str]:
    """DNS names, IP addresses and common names a certificate is issued for."""
    try:
        cert = x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise ConnectionSetupError(f"create gRPC connection: unreadable server certificate: {exc}") from exc

    names: List[str] = []
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        pass
    else:
        names.extend(san.get_values_for_type(x509.DNSName))
        names.extend(str(ip) for ip in san.get_values_for_type(x509.IPAddress))
    names.extend(
        str(attribute.value) for attribute in cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    )
    return names


def pick_target_name(names: Sequence[str]) -> Optional[str]:
    """Choose the name the channel checks the certificate against."""
    for name in names:
        if name.startswith("*."):
            return "x" + name[1:]
        if name:
            return name
    return None


def split_host_port(address: str) -> Tuple[str, int]:
    """Split a gRPC target such as ``dns:///host:443`` or ``[::1]:7070``."""
    target = address
    if "://" in target:
        target = target.split("://", 1)[1]
    target = target.lstrip("/")

    if target.startswith("["):
        host, _, rest = target[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    elif target.count(":") == 1:
        host, _, port = target.partition(":")
    else:
        host, port = target, ""

    if not host:
        raise ConnectionSetupError(f"create gRPC connection: invalid address {address!r}")
    try:
        return host, int(port) if port else _DEFAULT_TLS_PORT
    except ValueError as exc:
        raise ConnectionSetupError(f"create gRPC connection: invalid port in {address!r}") from exc


__all__ = [
    "BearerToken",
    "BearerTokenInterceptor",
    "build_channel",
    "certificate_names",
    "fetch_server_certificate",
    "pick_target_name",
    "resolve_bearer_token",
    "split_host_port",
]
