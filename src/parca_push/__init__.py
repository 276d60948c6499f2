"""
Push pprof profiles to a Parca-compatible profile store.

Prefer importing concrete components from their specific submodules; the
names below are the ones most callers need.
"""

from .core.errors import (
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
from .core.types import PushConfig, RemoteStoreConfig
from .execution import push, run, supervise

__all__ = [
    "ConfigurationError",
    "ConnectionSetupError",
    "DecodeError",
    "EncodeError",
    "Interrupted",
    "PushConfig",
    "PushError",
    "ReadError",
    "RemoteStoreConfig",
    "TokenFileError",
    "UploadError",
    "push",
    "run",
    "supervise",
]
