"""Errors raised while pushing a profile.

Every stage wraps the underlying failure with a short context string so the
CLI can print a single line such as ``read profile file: [Errno 2] ...``.
"""

from __future__ import annotations


class PushError(Exception):
    """Base class for all failures surfaced by ``parca-push``."""


class ConfigurationError(PushError):
    """Command-line arguments are missing, malformed or contradictory."""


class ConnectionSetupError(PushError):
    """The gRPC channel to the remote store could not be created."""


class ReadError(PushError):
    """The profile source could not be read."""


class TokenFileError(ReadError):
    """The bearer token file could not be read."""


class DecodeError(PushError):
    """The profile bytes are not a well-formed pprof encoding."""


class EncodeError(PushError):
    """The rewritten profile could not be serialized."""


class UploadError(PushError):
    """The WriteRaw call failed on the transport or on the remote side."""


class Interrupted(PushError):
    """A termination signal arrived before the profile was written."""


__all__ = [
    "ConfigurationError",
    "ConnectionSetupError",
    "DecodeError",
    "EncodeError",
    "Interrupted",
    "PushError",
    "ReadError",
    "TokenFileError",
    "UploadError",
]
