from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

STDIN_PATH = "-"


@dataclass(frozen=True, slots=True)
class RemoteStoreConfig:
    """Where and how to reach the profile store."""

    address: str
    bearer_token: Optional[str] = None
    bearer_token_file: Optional[str] = None
    insecure: bool = False
    insecure_skip_verify: bool = False


@dataclass(frozen=True, slots=True)
class PushConfig:
    """Parsed command line for a single push."""

    path: str
    remote_store: RemoteStoreConfig
    labels: Mapping[str, str] = field(default_factory=dict)
    normalized: bool = False
    override_timestamp: bool = False

    @property
    def reads_stdin(self) -> bool:
        return self.path == STDIN_PATH


__all__ = ["PushConfig", "RemoteStoreConfig", "STDIN_PATH"]
