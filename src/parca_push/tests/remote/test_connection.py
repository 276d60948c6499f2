from __future__ import annotations

import pytest

from parca_push.core.errors import ConnectionSetupError, ReadError, TokenFileError
from parca_push.core.types import RemoteStoreConfig
from parca_push.remote import BearerToken, resolve_bearer_token
from parca_push.remote.connection import split_host_port


def test_bearer_token_metadata() -> None:
    token = BearerToken("s3cr3t", insecure=False)

    assert token.metadata() == (("authorization", "Bearer s3cr3t"),)


def test_bearer_token_requires_tls_unless_insecure() -> None:
    assert BearerToken("t", insecure=False).require_transport_security()
    assert not BearerToken("t", insecure=True).require_transport_security()


def test_bearer_token_plugin_invokes_callback() -> None:
    received = []

    BearerToken("abc", insecure=False)(None, lambda metadata, error: received.append((metadata, error)))

    assert received == [((("authorization", "Bearer abc"),), None)]


def test_inline_token_is_used_as_is() -> None:
    remote = RemoteStoreConfig(address="localhost:7070", bearer_token="inline")

    assert resolve_bearer_token(remote) == "inline"


def test_no_token_configured() -> None:
    assert resolve_bearer_token(RemoteStoreConfig(address="localhost:7070")) is None


def test_token_file_drops_trailing_whitespace_only(tmp_path) -> None:
    token_file = tmp_path / "token"
    token_file.write_text(" from-file\n")
    remote = RemoteStoreConfig(address="localhost:7070", bearer_token_file=str(token_file))

    assert resolve_bearer_token(remote) == " from-file"


def test_missing_token_file_raises_token_file_error(tmp_path) -> None:
    remote = RemoteStoreConfig(address="localhost:7070", bearer_token_file=str(tmp_path / "nope"))

    with pytest.raises(TokenFileError, match="bearer token") as excinfo:
        resolve_bearer_token(remote)
    assert isinstance(excinfo.value, ReadError)


@pytest.mark.parametrize(
    ("address", "expected"),
    [
        ("grpc.example.com:443", ("grpc.example.com", 443)),
        ("grpc.example.com", ("grpc.example.com", 443)),
        ("dns:///grpc.example.com:7070", ("grpc.example.com", 7070)),
        ("[::1]:7070", ("::1", 7070)),
        ("[::1]", ("::1", 443)),
    ],
)
def test_split_host_port(address: str, expected: tuple[str, int]) -> None:
    assert split_host_port(address) == expected


def test_split_host_port_rejects_bad_port() -> None:
    with pytest.raises(ConnectionSetupError):
        split_host_port("example.com:http")
