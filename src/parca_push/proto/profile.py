"""Dynamic protobuf definition of the pprof ``perftools.profiles.Profile`` message.

Field numbers follow ``profile.proto`` from github.com/google/pprof. Only the
message classes are needed; the file is registered in the default descriptor
pool the first time it is requested.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Type

from google.protobuf import descriptor_pool, message_factory

from ._descriptors import FieldType, add_field, add_repeated, descriptor_pb2

_FILE_NAME = "perftools/profiles/profile.proto"
_PACKAGE = "perftools.profiles"


@dataclass(frozen=True)
class ProfileBundle:
    """Message classes of the pprof schema."""

    ProfileCls: Type[Any]
    ValueTypeCls: Type[Any]
    SampleCls: Type[Any]
    MappingCls: Type[Any]
    LocationCls: Type[Any]
    FunctionCls: Type[Any]


_PROFILE_BUNDLE: ProfileBundle | None = None


def get_profile_bundle() -> ProfileBundle:
    """Return the cached pprof message classes, registering the schema on first use."""

    global _PROFILE_BUNDLE
    if _PROFILE_BUNDLE is not None:
        return _PROFILE_BUNDLE

    pool = descriptor_pool.Default()
    try:
        pool.FindFileByName(_FILE_NAME)
    except KeyError:
        _register_proto_descriptors(pool)

    def message(name: str) -> Type[Any]:
        return message_factory.GetMessageClass(pool.FindMessageTypeByName(f"{_PACKAGE}.{name}"))

    _PROFILE_BUNDLE = ProfileBundle(
        ProfileCls=message("Profile"),
        ValueTypeCls=message("ValueType"),
        SampleCls=message("Sample"),
        MappingCls=message("Mapping"),
        LocationCls=message("Location"),
        FunctionCls=message("Function"),
    )
    return _PROFILE_BUNDLE


def _register_proto_descriptors(pool: descriptor_pool.DescriptorPool) -> None:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = _FILE_NAME
    file_proto.package = _PACKAGE
    file_proto.syntax = "proto3"

    profile = file_proto.message_type.add()
    profile.name = "Profile"
    add_repeated(profile, "sample_type", 1, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.ValueType")
    add_repeated(profile, "sample", 2, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.Sample")
    add_repeated(profile, "mapping", 3, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.Mapping")
    add_repeated(profile, "location", 4, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.Location")
    add_repeated(profile, "function", 5, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.Function")
    add_repeated(profile, "string_table", 6, FieldType.TYPE_STRING)
    add_field(profile, "drop_frames", 7, FieldType.TYPE_INT64)
    add_field(profile, "keep_frames", 8, FieldType.TYPE_INT64)
    add_field(profile, "time_nanos", 9, FieldType.TYPE_INT64)
    add_field(profile, "duration_nanos", 10, FieldType.TYPE_INT64)
    add_field(profile, "period_type", 11, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.ValueType")
    add_field(profile, "period", 12, FieldType.TYPE_INT64)
    add_repeated(profile, "comment", 13, FieldType.TYPE_INT64)
    add_field(profile, "default_sample_type", 14, FieldType.TYPE_INT64)
    add_field(profile, "doc_url", 15, FieldType.TYPE_INT64)

    value_type = file_proto.message_type.add()
    value_type.name = "ValueType"
    add_field(value_type, "type", 1, FieldType.TYPE_INT64)
    add_field(value_type, "unit", 2, FieldType.TYPE_INT64)

    sample = file_proto.message_type.add()
    sample.name = "Sample"
    add_repeated(sample, "location_id", 1, FieldType.TYPE_UINT64)
    add_repeated(sample, "value", 2, FieldType.TYPE_INT64)
    add_repeated(sample, "label", 3, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.Label")

    label = file_proto.message_type.add()
    label.name = "Label"
    add_field(label, "key", 1, FieldType.TYPE_INT64)
    add_field(label, "str", 2, FieldType.TYPE_INT64)
    add_field(label, "num", 3, FieldType.TYPE_INT64)
    add_field(label, "num_unit", 4, FieldType.TYPE_INT64)

    mapping = file_proto.message_type.add()
    mapping.name = "Mapping"
    add_field(mapping, "id", 1, FieldType.TYPE_UINT64)
    add_field(mapping, "memory_start", 2, FieldType.TYPE_UINT64)
    add_field(mapping, "memory_limit", 3, FieldType.TYPE_UINT64)
    add_field(mapping, "file_offset", 4, FieldType.TYPE_UINT64)
    add_field(mapping, "filename", 5, FieldType.TYPE_INT64)
    add_field(mapping, "build_id", 6, FieldType.TYPE_INT64)
    add_field(mapping, "has_functions", 7, FieldType.TYPE_BOOL)
    add_field(mapping, "has_filenames", 8, FieldType.TYPE_BOOL)
    add_field(mapping, "has_line_numbers", 9, FieldType.TYPE_BOOL)
    add_field(mapping, "has_inline_frames", 10, FieldType.TYPE_BOOL)

    location = file_proto.message_type.add()
    location.name = "Location"
    add_field(location, "id", 1, FieldType.TYPE_UINT64)
    add_field(location, "mapping_id", 2, FieldType.TYPE_UINT64)
    add_field(location, "address", 3, FieldType.TYPE_UINT64)
    add_repeated(location, "line", 4, FieldType.TYPE_MESSAGE, type_name=".perftools.profiles.Line")
    add_field(location, "is_folded", 5, FieldType.TYPE_BOOL)

    line = file_proto.message_type.add()
    line.name = "Line"
    add_field(line, "function_id", 1, FieldType.TYPE_UINT64)
    add_field(line, "line", 2, FieldType.TYPE_INT64)
    add_field(line, "column", 3, FieldType.TYPE_INT64)

    function = file_proto.message_type.add()
    function.name = "Function"
    add_field(function, "id", 1, FieldType.TYPE_UINT64)
    add_field(function, "name", 2, FieldType.TYPE_INT64)
    add_field(function, "system_name", 3, FieldType.TYPE_INT64)
    add_field(function, "filename", 4, FieldType.TYPE_INT64)
    add_field(function, "start_line", 5, FieldType.TYPE_INT64)

    pool.Add(file_proto)


__all__ = ["ProfileBundle", "get_profile_bundle"]
