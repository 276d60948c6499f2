from __future__ import annotations

import contextlib
import datetime
import socket
import threading
from concurrent import futures
from typing import Any, Iterator

import grpc
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from parca_push.proto import get_profile_bundle, get_profilestore_bundle
from parca_push.proto.profilestore import SERVICE_NAME


class RecordingStore:
    """In-process WriteRaw implementation that records what it receives."""

    def __init__(self) -> None:
        self.address = ""
        self.requests: list[Any] = []
        self.metadata: list[dict[str, str]] = []
        self.fail_with: tuple[grpc.StatusCode, str] | None = None
        self.block = False
        self.entered = threading.Event()
        self.release = threading.Event()

    def write_raw(self, request, context):
        self.requests.append(request)
        self.metadata.append({item.key: item.value for item in context.invocation_metadata()})
        self.entered.set()
        if self.block:
            self.release.wait(timeout=10)
        if self.fail_with is not None:
            context.abort(*self.fail_with)
        return get_profilestore_bundle().WriteRawResponseCls()


@contextlib.contextmanager
def _serve_store(credentials: grpc.ServerCredentials | None = None) -> Iterator[RecordingStore]:
    bundle = get_profilestore_bundle()
    store = RecordingStore()
    handler = grpc.method_handlers_generic_handler(
        SERVICE_NAME,
        {
            "WriteRaw": grpc.unary_unary_rpc_method_handler(
                store.write_raw,
                request_deserializer=bundle.WriteRawRequestCls.FromString,
                response_serializer=bundle.WriteRawResponseCls.SerializeToString,
            )
        },
    )
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=4))
    server.add_generic_rpc_handlers((handler,))
    if credentials is None:
        port = server.add_insecure_port("127.0.0.1:0")
    else:
        port = server.add_secure_port("127.0.0.1:0", credentials)
    server.start()
    store.address = f"127.0.0.1:{port}"
    try:
        yield store
    finally:
        store.release.set()
        server.stop(grace=None)


@pytest.fixture
def profile_store():
    with _serve_store() as store:
        yield store


@pytest.fixture(scope="session")
def self_signed_certificate() -> tuple[bytes, bytes]:
    """PEM key and certificate issued for ``localhost`` only."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName("localhost")]), critical=False)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return key_pem, certificate.public_bytes(serialization.Encoding.PEM)


@pytest.fixture
def tls_profile_store(self_signed_certificate):
    """Profile store served over TLS; its address is ``127.0.0.1:<port>``."""
    key_pem, cert_pem = self_signed_certificate
    with _serve_store(grpc.ssl_server_credentials([(key_pem, cert_pem)])) as store:
        yield store


@pytest.fixture
def make_profile():
    """Factory for a small but complete CPU profile message."""

    def _make(time_nanos: int = 1_700_000_000_000_000_000) -> Any:
        profile = get_profile_bundle().ProfileCls()
        profile.string_table.extend(["", "samples", "count", "cpu", "nanoseconds", "main", "/usr/bin/app"])
        profile.sample_type.add(type=1, unit=2)
        profile.period_type.type = 3
        profile.period_type.unit = 4
        profile.period = 10_000_000
        profile.mapping.add(id=1, memory_start=0x400000, memory_limit=0x500000, filename=6, has_functions=True)
        profile.function.add(id=1, name=5, system_name=5)
        location = profile.location.add(id=1, mapping_id=1, address=0x401000)
        location.line.add(function_id=1, line=42)
        profile.sample.add(location_id=[1], value=[7])
        profile.time_nanos = time_nanos
        profile.duration_nanos = 1_000_000_000
        return profile

    return _make


@pytest.fixture
def unused_address() -> str:
    """Address of a local port that nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1:{port}"


@pytest.fixture
def stalled_address() -> Iterator[str]:
    """Address that accepts TCP connections but never answers a TLS handshake."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.bind(("127.0.0.1", 0))
        listener.listen(8)
        yield f"127.0.0.1:{listener.getsockname()[1]}"
