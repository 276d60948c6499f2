"""Shared configuration types and the error taxonomy."""

from .errors import (
    ConfigurationError,
    ConnectionSetupError,
    DecodeError,
    EncodeError,
    Interrupted,
    PushError,
    ReadError,
    TokenFileError,
    UploadError,
)
from .types import PushConfig, RemoteStoreConfig

__all__ = [
    "ConfigurationError",
    "ConnectionSetupError",
    "DecodeError",
    "EncodeError",
    "Interrupted",
    "PushError",
    "PushConfig",
    "ReadError",
    "RemoteStoreConfig",
    "TokenFileError",
    "UploadError",
]
