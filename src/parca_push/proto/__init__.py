"""Dynamic protobuf definitions for pprof and the Parca profile store API."""

from .profile import ProfileBundle, get_profile_bundle
from .profilestore import ProfileStoreBundle, get_profilestore_bundle

__all__ = [
    "ProfileBundle",
    "ProfileStoreBundle",
    "get_profile_bundle",
    "get_profilestore_bundle",
]
