"""Helpers shared by the dynamically registered proto files."""

from __future__ import annotations

from typing import Any, cast

from google.protobuf import descriptor_pb2 as _descriptor_pb2

descriptor_pb2 = cast(Any, _descriptor_pb2)

FieldType = descriptor_pb2.FieldDescriptorProto
LABEL_OPTIONAL = descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
LABEL_REPEATED = descriptor_pb2.FieldDescriptorProto.LABEL_REPEATED


def add_field(message, name, number, field_type, *, type_name=None, label=LABEL_OPTIONAL):
    field = message.field.add()
    field.name = name
    field.number = number
    field.label = label
    field.type = field_type
    if type_name:
        field.type_name = type_name
    return field


def add_repeated(message, name, number, field_type, *, type_name=None):
    return add_field(message, name, number, field_type, type_name=type_name, label=LABEL_REPEATED)


__all__ = ["FieldType", "LABEL_OPTIONAL", "LABEL_REPEATED", "add_field", "add_repeated", "descriptor_pb2"]
