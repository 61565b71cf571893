"""Protobuf message classes for the export wire format.

The descriptor below mirrors ``exposure_export.proto`` field for field. It is
registered in a private descriptor pool so the classes can be built without a
protoc step at install time.
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "exposure_export"

_FDP = descriptor_pb2.FieldDescriptorProto
_OPTIONAL = _FDP.LABEL_OPTIONAL
_REPEATED = _FDP.LABEL_REPEATED

# (message, [(field, number, label, type, type_name, default)])
_MESSAGES: list[tuple[str, list[tuple[str, int, int, int, str | None, str | None]]]] = [
    (
        "SignatureInfo",
        [
            ("app_bundle_id", 1, _OPTIONAL, _FDP.TYPE_STRING, None, None),
            ("android_package", 2, _OPTIONAL, _FDP.TYPE_STRING, None, None),
            ("verification_key_version", 3, _OPTIONAL, _FDP.TYPE_STRING, None, None),
            ("verification_key_id", 4, _OPTIONAL, _FDP.TYPE_STRING, None, None),
            ("signature_algorithm", 5, _OPTIONAL, _FDP.TYPE_STRING, None, None),
        ],
    ),
    (
        "TemporaryExposureKey",
        [
            ("key_data", 1, _OPTIONAL, _FDP.TYPE_BYTES, None, None),
            ("transmission_risk_level", 2, _OPTIONAL, _FDP.TYPE_INT32, None, None),
            ("rolling_start_interval_number", 3, _OPTIONAL, _FDP.TYPE_INT32, None, None),
            ("rolling_period", 4, _OPTIONAL, _FDP.TYPE_INT32, None, "144"),
        ],
    ),
    (
        "TemporaryExposureKeyExport",
        [
            ("start_timestamp", 1, _OPTIONAL, _FDP.TYPE_FIXED64, None, None),
            ("end_timestamp", 2, _OPTIONAL, _FDP.TYPE_FIXED64, None, None),
            ("region", 3, _OPTIONAL, _FDP.TYPE_STRING, None, None),
            ("batch_num", 4, _OPTIONAL, _FDP.TYPE_INT32, None, None),
            ("batch_size", 5, _OPTIONAL, _FDP.TYPE_INT32, None, None),
            ("signature_infos", 6, _REPEATED, _FDP.TYPE_MESSAGE, "SignatureInfo", None),
            ("keys", 7, _REPEATED, _FDP.TYPE_MESSAGE, "TemporaryExposureKey", None),
        ],
    ),
    (
        "TEKSignature",
        [
            ("signature_info", 1, _OPTIONAL, _FDP.TYPE_MESSAGE, "SignatureInfo", None),
            ("batch_num", 2, _OPTIONAL, _FDP.TYPE_INT32, None, None),
            ("batch_size", 3, _OPTIONAL, _FDP.TYPE_INT32, None, None),
            ("signature", 4, _OPTIONAL, _FDP.TYPE_BYTES, None, None),
        ],
    ),
    (
        "TEKSignatureList",
        [
            ("signatures", 1, _REPEATED, _FDP.TYPE_MESSAGE, "TEKSignature", None),
        ],
    ),
]


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="exposure_export.proto",
        package=PACKAGE,
        syntax="proto2",
    )
    for message_name, fields in _MESSAGES:
        message = file_proto.message_type.add(name=message_name)
        for name, number, label, field_type, type_name, default in fields:
            field = message.field.add(name=name, number=number, label=label, type=field_type)
            if type_name is not None:
                field.type_name = f".{PACKAGE}.{type_name}"
            if default is not None:
                field.default_value = default
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str) -> type:
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


SignatureInfo = _message_class("SignatureInfo")
TemporaryExposureKey = _message_class("TemporaryExposureKey")
TemporaryExposureKeyExport = _message_class("TemporaryExposureKeyExport")
TEKSignature = _message_class("TEKSignature")
TEKSignatureList = _message_class("TEKSignatureList")

__all__ = [
    "SignatureInfo",
    "TEKSignature",
    "TEKSignatureList",
    "TemporaryExposureKey",
    "TemporaryExposureKeyExport",
]
