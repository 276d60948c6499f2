"""Reading and rewriting pprof profiles."""

from .loader import read_profile
from .transform import decode_profile, encode_profile, prepare_profile

__all__ = ["decode_profile", "encode_profile", "prepare_profile", "read_profile"]
