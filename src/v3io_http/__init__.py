"""Synchronous client access layer for v3io containers.

Exposes the container facade plus the codec, builders and decoders it is made
of.
"""
from .attributes import decode_attributes, encode_attributes, format_number
from .client import V3ioConfig, get_container
from .container import SyncContainer
from .cursor import CursorState, ItemsCursor
from .exceptions import (
    ConfigurationError,
    MalformedAttributeError,
    MalformedBinaryAttributeError,
    MalformedNumericAttributeError,
    MalformedResponseError,
    SerializationError,
    TransportError,
    UnsupportedAttributeTypeError,
    V3ioError,
)
from .session import Response, SyncSession
from .types import (
    CreateStreamInput,
    DeleteObjectInput,
    DeleteStreamInput,
    DeleteStreamOutput,
    GetItemInput,
    GetItemOutput,
    GetItemsInput,
    GetItemsOutput,
    GetObjectInput,
    GetRecordsInput,
    GetRecordsOutput,
    ListBucketInput,
    ListBucketOutput,
    PutItemInput,
    PutItemsInput,
    PutItemsOutput,
    PutObjectInput,
    PutRecordsInput,
    PutRecordsOutput,
    Record,
    SeekShardInput,
    SeekShardOutput,
    SeekShardType,
    UpdateItemInput,
)

__all__ = [
    "V3ioConfig",
    "get_container",
    "SyncContainer",
    "SyncSession",
    "Response",
    "ItemsCursor",
    "CursorState",
    "encode_attributes",
    "decode_attributes",
    "format_number",
    "V3ioError",
    "ConfigurationError",
    "TransportError",
    "SerializationError",
    "UnsupportedAttributeTypeError",
    "MalformedResponseError",
    "MalformedAttributeError",
    "MalformedNumericAttributeError",
    "MalformedBinaryAttributeError",
    "ListBucketInput",
    "ListBucketOutput",
    "GetObjectInput",
    "PutObjectInput",
    "DeleteObjectInput",
    "GetItemInput",
    "GetItemOutput",
    "GetItemsInput",
    "GetItemsOutput",
    "PutItemInput",
    "PutItemsInput",
    "PutItemsOutput",
    "UpdateItemInput",
    "CreateStreamInput",
    "DeleteStreamInput",
    "DeleteStreamOutput",
    "Record",
    "PutRecordsInput",
    "PutRecordsOutput",
    "SeekShardType",
    "SeekShardInput",
    "SeekShardOutput",
    "GetRecordsInput",
    "GetRecordsOutput",
]
