"""Optional timestamp rewrite of a pprof profile.

pprof files are usually gzip-compressed protobuf. Decoding accepts both the
compressed and the plain form; encoding always compresses, which is what
pprof writers produce.
"""

from __future__ import annotations

import gzip
import logging
import time
import zlib
from typing import Any, Optional

from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.protobuf.message import EncodeError as ProtobufEncodeError

from ..core.errors import DecodeError, EncodeError
from ..proto import get_profile_bundle

logger = logging.getLogger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(data: bytes) -> bool:
    return data[:2] == _GZIP_MAGIC


def decode_profile(data: bytes) -> Any:
    """Parse raw profile bytes into a validated ``perftools.profiles.Profile`` message."""
    if not data:
        raise DecodeError("parse pprof profile: empty input file")
    if is_gzipped(data):
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise DecodeError(f"parse pprof profile: decompress: {exc}") from exc

    profile = get_profile_bundle().ProfileCls()
    try:
        profile.ParseFromString(data)
    except ProtobufDecodeError as exc:
        raise DecodeError(f"parse pprof profile: {exc}") from exc

    problem = check_valid(profile)
    if problem is not None:
        raise DecodeError(f"parse pprof profile: {problem}")
    return profile


def check_valid(profile: Any) -> Optional[str]:
    """Return why ``profile`` is not a consistent pprof profile, or ``None``."""
    if not profile.string_table:
        return "malformed profile: no string table"
    if profile.string_table[0] != "":
        return "malformed profile: string_table[0] must be ''"
    if not profile.sample_type and profile.sample:
        return "missing sample type information"

    mapping_ids = set()
    for mapping in profile.mapping:
        if mapping.id == 0 or mapping.id in mapping_ids:
            return f"found mapping with reserved or duplicate ID={mapping.id}"
        mapping_ids.add(mapping.id)

    function_ids = set()
    for function in profile.function:
        if function.id == 0 or function.id in function_ids:
            return f"found function with reserved or duplicate ID={function.id}"
        function_ids.add(function.id)

    location_ids = set()
    for location in profile.location:
        if location.id == 0 or location.id in location_ids:
            return f"found location with reserved or duplicate ID={location.id}"
        location_ids.add(location.id)
        if location.mapping_id and location.mapping_id not in mapping_ids:
            return f"location {location.id} references unknown mapping ID={location.mapping_id}"
        for line in location.line:
            if line.function_id and line.function_id not in function_ids:
                return f"location {location.id} references unknown function ID={line.function_id}"

    sample_types = len(profile.sample_type)
    for index, sample in enumerate(profile.sample):
        if len(sample.value) != sample_types:
            return f"mismatch: sample {index} has {len(sample.value)} values vs. {sample_types} types"
        for location_id in sample.location_id:
            if location_id not in location_ids:
                return f"sample {index} references unknown location ID={location_id}"
    return None


def encode_profile(profile: Any) -> bytes:
    """Serialize ``profile`` and gzip it."""
    try:
        payload = profile.SerializeToString()
    except ProtobufEncodeError as exc:
        raise EncodeError(f"serialize pprof profile: {exc}") from exc
    return gzip.compress(payload)


def prepare_profile(data: bytes, override_timestamp: bool, now_ns: Optional[int] = None) -> bytes:
    """Return the bytes to upload.

    Without ``override_timestamp`` the input is returned untouched. Otherwise
    the profile is decoded, ``time_nanos`` is set to ``now_ns`` (defaults to
    the current wall-clock time) and the profile is re-encoded.
    """
    if not override_timestamp:
        return data

    profile = decode_profile(data)
    timestamp = time.time_ns() if now_ns is None else now_ns
    logger.debug("Overriding profile timestamp %d with %d", profile.time_nanos, timestamp)
    profile.time_nanos = timestamp
    return encode_profile(profile)


__all__ = ["check_valid", "decode_profile", "encode_profile", "is_gzipped", "prepare_profile"]
