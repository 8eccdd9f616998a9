"""
Request builders.

Each builder turns a typed input into a ``PreparedRequest``: the HTTP method,
the path relative to the container root, the fixed header pair of the remote
function and the serialized body. Optional body fields are only written when
they carry a value.

Function dispatch
-----------------
Every JSON call names its remote function in ``X-v3io-function``:

  PUT  <container>/<path>  X-v3io-function: PutItem   {"Item": {...}}
  POST <container>/<path>  X-v3io-function: SeekShard {"Type": "LATEST"}
"""
from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .attributes import encode_attributes
from .exceptions import SerializationError
from .keys import list_bucket_query
from .types import (
    UPDATE_MODE_CREATE_OR_REPLACE,
    CreateStreamInput,
    DeleteObjectInput,
    GetItemInput,
    GetItemsInput,
    GetObjectInput,
    GetRecordsInput,
    ListBucketInput,
    PutObjectInput,
    PutRecordsInput,
    Record,
    SeekShardInput,
    SeekShardType,
    UpdateItemInput,
)

# Function names
SET_OBJECT_FUNCTION = "ObjectSet"
PUT_ITEM_FUNCTION = "PutItem"
UPDATE_ITEM_FUNCTION = "UpdateItem"
GET_ITEM_FUNCTION = "GetItem"
GET_ITEMS_FUNCTION = "GetItems"
CREATE_STREAM_FUNCTION = "CreateStream"
PUT_RECORDS_FUNCTION = "PutRecords"
GET_RECORDS_FUNCTION = "GetRecords"
SEEK_SHARD_FUNCTION = "SeekShard"


def _function_headers(function_name: str) -> Dict[str, str]:
    return {"Content-Type": "application/json", "X-v3io-function": function_name}


FUNCTION_HEADERS: Dict[str, Dict[str, str]] = {
    name: _function_headers(name)
    for name in (
        SET_OBJECT_FUNCTION,
        PUT_ITEM_FUNCTION,
        UPDATE_ITEM_FUNCTION,
        GET_ITEM_FUNCTION,
        GET_ITEMS_FUNCTION,
        CREATE_STREAM_FUNCTION,
        PUT_RECORDS_FUNCTION,
        GET_RECORDS_FUNCTION,
        SEEK_SHARD_FUNCTION,
    )
}


@dataclass(frozen=True)
class PreparedRequest:
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def json(self) -> Any:
        """Parsed body, for inspection."""
        return json.loads(self.body) if self.body else None


def _prepare(method: str, path: str, function_name: str, body: Mapping[str, Any]) -> PreparedRequest:
    try:
        encoded = json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to serialize {function_name} body: {exc}") from exc
    # copy so callers cannot mutate the shared constants
    return PreparedRequest(method, path, dict(FUNCTION_HEADERS[function_name]), encoded)


def _b64(data: bytes) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


# ---------- Objects ----------
def build_list_bucket(request: ListBucketInput) -> PreparedRequest:
    # the path is appended to the container root itself, not below it
    return PreparedRequest("GET", list_bucket_query(request.path))


def build_get_object(request: GetObjectInput) -> PreparedRequest:
    return PreparedRequest("GET", request.path)


def build_put_object(request: PutObjectInput) -> PreparedRequest:
    return PreparedRequest("PUT", request.path, body=bytes(request.body))


def build_delete_object(request: DeleteObjectInput) -> PreparedRequest:
    return PreparedRequest("DELETE", request.path)


# ---------- Items ----------
def build_get_item(request: GetItemInput) -> PreparedRequest:
    body = {"AttributesToGet": ",".join(request.attribute_names)}
    return _prepare("PUT", request.path, GET_ITEM_FUNCTION, body)


def build_get_items(request: GetItemsInput) -> PreparedRequest:
    body: Dict[str, Any] = {}
    if request.attribute_names:
        body["AttributesToGet"] = ",".join(request.attribute_names)
    if request.filter:
        body["FilterExpression"] = request.filter
    if request.marker:
        body["Marker"] = request.marker
    if request.sharding_key:
        body["ShardingKey"] = request.sharding_key
    if request.limit:
        body["Limit"] = request.limit
    if request.total_segments:
        body["TotalSegment"] = request.total_segments
        body["Segment"] = request.segment
    if request.sort_key_range_start:
        body["SortKeyRangeStart"] = request.sort_key_range_start
    if request.sort_key_range_end:
        body["SortKeyRangeEnd"] = request.sort_key_range_end
    return _prepare("PUT", request.path, GET_ITEMS_FUNCTION, body)


def build_put_item(
    path: str,
    attributes: Mapping[str, Any],
    condition: str = "",
    base_body: Optional[Mapping[str, Any]] = None,
) -> PreparedRequest:
    """PutItem request; ``base_body`` fields are sent beside ``Item``."""
    body: Dict[str, Any] = dict(base_body or {})
    body["Item"] = encode_attributes(attributes)
    if condition:
        body["ConditionExpression"] = condition
    return _prepare("PUT", path, PUT_ITEM_FUNCTION, body)


def build_update_item(request: UpdateItemInput) -> PreparedRequest:
    """Wholesale attribute replacement or an update expression.

    Attributes go through PutItem with ``UpdateMode`` set; an expression goes
    through UpdateItem.
    """
    if request.attributes is not None and request.expression is not None:
        raise SerializationError("Update takes either attributes or an expression, not both")
    if request.attributes is not None:
        return build_put_item(
            request.path,
            request.attributes,
            request.condition,
            base_body={"UpdateMode": UPDATE_MODE_CREATE_OR_REPLACE},
        )
    if request.expression is not None:
        body: Dict[str, Any] = {
            "UpdateExpression": request.expression,
            "UpdateMode": UPDATE_MODE_CREATE_OR_REPLACE,
        }
        if request.condition:
            body["ConditionExpression"] = request.condition
        return _prepare("POST", request.path, UPDATE_ITEM_FUNCTION, body)
    raise SerializationError("Update needs attributes or an expression")


# ---------- Streams ----------
def build_create_stream(request: CreateStreamInput) -> PreparedRequest:
    body = {
        "ShardCount": request.shard_count,
        "RetentionPeriodHours": request.retention_period_hours,
    }
    return _prepare("POST", request.path, CREATE_STREAM_FUNCTION, body)


def record_body(record: Record) -> Dict[str, Any]:
    body: Dict[str, Any] = {"Data": _b64(record.data)}
    if record.client_info is not None:
        body["ClientInfo"] = _b64(record.client_info)
    if record.shard_id is not None:
        body["ShardId"] = record.shard_id
    if record.partition_key:
        body["PartitionKey"] = record.partition_key
    return body


def build_put_records(request: PutRecordsInput) -> PreparedRequest:
    body = {"Records": [record_body(record) for record in request.records]}
    return _prepare("POST", request.path, PUT_RECORDS_FUNCTION, body)


def build_seek_shard(request: SeekShardInput) -> PreparedRequest:
    try:
        seek_type = SeekShardType(request.type)
    except ValueError as exc:
        raise SerializationError(f"Unknown seek type: {request.type!r}") from exc
    body: Dict[str, Any] = {"Type": seek_type.value}
    if seek_type is SeekShardType.SEQUENCE:
        body["StartingSequenceNumber"] = request.starting_sequence_number
    elif seek_type is SeekShardType.TIME:
        body["TimestampSec"] = request.timestamp
        body["TimestampNSec"] = 0
    return _prepare("POST", request.path, SEEK_SHARD_FUNCTION, body)


def build_get_records(request: GetRecordsInput) -> PreparedRequest:
    body = {"Location": request.location, "Limit": request.limit}
    return _prepare("POST", request.path, GET_RECORDS_FUNCTION, body)
