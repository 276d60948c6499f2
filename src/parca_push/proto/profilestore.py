"""Dynamic protobuf helpers for the Parca profile store API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Type

import grpc
from google.protobuf import descriptor_pool, message_factory

from ._descriptors import FieldType, add_field, add_repeated, descriptor_pb2

_FILE_NAME = "parca/profilestore/v1alpha1/profilestore.proto"
_PACKAGE = "parca.profilestore.v1alpha1"

SERVICE_NAME = f"{_PACKAGE}.ProfileStoreService"
WRITE_RAW_METHOD = f"/{SERVICE_NAME}/WriteRaw"


@dataclass(frozen=True)
class ProfileStoreBundle:
    """Container for lazily constructed gRPC stub callables and message classes."""

    stub_factory: Type[Any]
    WriteRawRequestCls: Type[Any]
    WriteRawResponseCls: Type[Any]
    RawProfileSeriesCls: Type[Any]
    LabelSetCls: Type[Any]
    LabelCls: Type[Any]
    RawSampleCls: Type[Any]


_STUB_BUNDLE: ProfileStoreBundle | None = None


def get_profilestore_bundle() -> ProfileStoreBundle:
    """Return the cached profile store stub bundle, creating it on first use."""

    global _STUB_BUNDLE
    if _STUB_BUNDLE is not None:
        return _STUB_BUNDLE

    pool = descriptor_pool.Default()
    try:
        pool.FindFileByName(_FILE_NAME)
    except KeyError:
        _register_proto_descriptors(pool)

    def message(name: str) -> Type[Any]:
        return message_factory.GetMessageClass(pool.FindMessageTypeByName(f"{_PACKAGE}.{name}"))

    WriteRawRequestCls = message("WriteRawRequest")
    WriteRawResponseCls = message("WriteRawResponse")

    class ProfileStoreServiceStub:
        def __init__(self, channel: grpc.aio.Channel) -> None:
            self.WriteRaw = channel.unary_unary(
                WRITE_RAW_METHOD,
                request_serializer=WriteRawRequestCls.SerializeToString,
                response_deserializer=WriteRawResponseCls.FromString,
            )

    _STUB_BUNDLE = ProfileStoreBundle(
        stub_factory=ProfileStoreServiceStub,
        WriteRawRequestCls=WriteRawRequestCls,
        WriteRawResponseCls=WriteRawResponseCls,
        RawProfileSeriesCls=message("RawProfileSeries"),
        LabelSetCls=message("LabelSet"),
        LabelCls=message("Label"),
        RawSampleCls=message("RawSample"),
    )
    return _STUB_BUNDLE


def _register_proto_descriptors(pool: descriptor_pool.DescriptorPool) -> None:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = _FILE_NAME
    file_proto.package = _PACKAGE
    file_proto.syntax = "proto3"

    request = file_proto.message_type.add()
    request.name = "WriteRawRequest"
    tenant = add_field(request, "tenant", 1, FieldType.TYPE_STRING)
    tenant.options.deprecated = True
    add_repeated(request, "series", 2, FieldType.TYPE_MESSAGE, type_name=f".{_PACKAGE}.RawProfileSeries")
    add_field(request, "normalized", 3, FieldType.TYPE_BOOL)

    file_proto.message_type.add().name = "WriteRawResponse"

    series = file_proto.message_type.add()
    series.name = "RawProfileSeries"
    add_field(series, "labels", 1, FieldType.TYPE_MESSAGE, type_name=f".{_PACKAGE}.LabelSet")
    add_repeated(series, "samples", 2, FieldType.TYPE_MESSAGE, type_name=f".{_PACKAGE}.RawSample")

    label = file_proto.message_type.add()
    label.name = "Label"
    add_field(label, "name", 1, FieldType.TYPE_STRING)
    add_field(label, "value", 2, FieldType.TYPE_STRING)

    label_set = file_proto.message_type.add()
    label_set.name = "LabelSet"
    add_repeated(label_set, "labels", 1, FieldType.TYPE_MESSAGE, type_name=f".{_PACKAGE}.Label")

    sample = file_proto.message_type.add()
    sample.name = "RawSample"
    add_field(sample, "raw_profile", 1, FieldType.TYPE_BYTES)

    service = file_proto.service.add()
    service.name = "ProfileStoreService"

    write_raw = service.method.add()
    write_raw.name = "WriteRaw"
    write_raw.input_type = f".{_PACKAGE}.WriteRawRequest"
    write_raw.output_type = f".{_PACKAGE}.WriteRawResponse"

    pool.Add(file_proto)


__all__ = ["ProfileStoreBundle", "SERVICE_NAME", "WRITE_RAW_METHOD", "get_profilestore_bundle"]
