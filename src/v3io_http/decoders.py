from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict, List, Optional
from xml.parsers.expat import ExpatError

import xmltodict

from .attributes import decode_attributes
from .exceptions import MalformedResponseError
from .types import (
    CommonPrefix,
    Content,
    GetItemOutput,
    GetItemsOutput,
    GetRecordsOutput,
    GetRecordsResult,
    ListBucketOutput,
    PutRecordResult,
    PutRecordsOutput,
    SeekShardOutput,
)

logger = logging.getLogger("v3io_http.decoders")


def _load_object(body: bytes, what: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Failed to parse {what} response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError(f"Expected a JSON object in {what} response, got {type(parsed).__name__}")
    return parsed


def _int(value: Any, field: str, what: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, float) and not value.is_integer():
        raise MalformedResponseError(f"Invalid {field} in {what} response: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Invalid {field} in {what} response: {value!r}") from exc


def _list(value: Any, field: str, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(f"Expected a list for {field} in {what} response")
    return value


def _objects(value: Any, field: str, what: str) -> List[Dict[str, Any]]:
    entries = _list(value, field, what)
    if not all(isinstance(e, dict) for e in entries):
        raise MalformedResponseError(f"Expected objects in {field} of {what} response")
    return entries


def _bytes(value: Any, field: str, what: str) -> Optional[bytes]:
    if value is None:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise MalformedResponseError(f"Invalid base64 {field} in {what} response") from exc


# ---------- Items ----------
def decode_get_item(body: bytes, strict: bool = True) -> GetItemOutput:
    logger.debug("GetItem body: %s", body)
    parsed = _load_object(body, "GetItem")
    return GetItemOutput(item=decode_attributes(parsed.get("Item"), strict=strict))


def decode_get_items(body: bytes, sent_marker: str = "", strict: bool = True) -> GetItemsOutput:
    """Decode one page of a scan.

    A page that is not the last one must hand out a marker different from the
    one it was requested with. When it does not (commonly a single item larger
    than the response size ceiling), the page is flagged as an anomaly and a
    warning is logged; following such a marker would repeat the same request.
    """
    logger.debug("GetItems body: %s", body)
    parsed = _load_object(body, "GetItems")

    next_marker = parsed.get("NextMarker") or ""
    last = parsed.get("LastItemIncluded") == "TRUE"
    anomaly = not last and (next_marker == "" or next_marker == sent_marker)
    if anomaly:
        logger.warning(
            "Invalid GetItems response, lastItemIncluded=false without a new marker, "
            "probably due to an object bigger than the response size limit: %s",
            {"next_marker": next_marker, "start_marker": sent_marker},
        )

    items = [
        decode_attributes(typed_item, strict=strict)
        for typed_item in _list(parsed.get("Items"), "Items", "GetItems")
    ]
    return GetItemsOutput(items=items, next_marker=next_marker, last=last, anomaly=anomaly)


# ---------- Streams ----------
def decode_put_records(body: bytes) -> PutRecordsOutput:
    parsed = _load_object(body, "PutRecords")
    records = []
    for rec in _objects(parsed.get("Records"), "Records", "PutRecords"):
        records.append(
            PutRecordResult(
                sequence_number=_int(rec.get("SequenceNumber"), "SequenceNumber", "PutRecords"),
                shard_id=_int(rec.get("ShardId"), "ShardId", "PutRecords"),
                error_code=_int(rec.get("ErrorCode"), "ErrorCode", "PutRecords"),
                error_message=rec.get("ErrorMessage") or "",
            )
        )
    return PutRecordsOutput(
        failed_record_count=_int(parsed.get("FailedRecordCount"), "FailedRecordCount", "PutRecords"),
        records=records,
    )


def decode_get_records(body: bytes) -> GetRecordsOutput:
    parsed = _load_object(body, "GetRecords")
    records = []
    for rec in _objects(parsed.get("Records"), "Records", "GetRecords"):
        records.append(
            GetRecordsResult(
                arrival_time_sec=_int(rec.get("ArrivalTimeSec"), "ArrivalTimeSec", "GetRecords"),
                arrival_time_nsec=_int(rec.get("ArrivalTimeNSec"), "ArrivalTimeNSec", "GetRecords"),
                sequence_number=_int(rec.get("SequenceNumber"), "SequenceNumber", "GetRecords"),
                client_info=_bytes(rec.get("ClientInfo"), "ClientInfo", "GetRecords"),
                partition_key=rec.get("PartitionKey") or "",
                data=_bytes(rec.get("Data"), "Data", "GetRecords") or b"",
            )
        )
    return GetRecordsOutput(
        next_location=parsed.get("NextLocation") or "",
        msec_behind_latest=_int(parsed.get("MSecBehindLatest"), "MSecBehindLatest", "GetRecords"),
        records_behind_latest=_int(parsed.get("RecordsBehindLatest"), "RecordsBehindLatest", "GetRecords"),
        records=records,
    )


def decode_seek_shard(body: bytes) -> SeekShardOutput:
    parsed = _load_object(body, "SeekShard")
    return SeekShardOutput(location=parsed.get("Location") or "")


# ---------- Objects ----------
def _xml_entries(value: Any, element: str) -> List[Dict[str, Any]]:
    # empty elements are skipped, text-only ones are not entries at all
    entries = [entry for entry in value or [] if entry is not None]
    if not all(isinstance(entry, dict) for entry in entries):
        raise MalformedResponseError(f"Expected child elements in {element} of ListBucket response")
    return entries


def decode_list_bucket(body: bytes) -> ListBucketOutput:
    """Decode a ``ListBucketResult`` XML document."""
    try:
        parsed = xmltodict.parse(body, force_list=("Contents", "CommonPrefixes"))
    except ExpatError as exc:
        raise MalformedResponseError(f"Failed to parse ListBucket response: {exc}") from exc

    if not isinstance(parsed, dict) or "ListBucketResult" not in parsed:
        raise MalformedResponseError("ListBucket response has no ListBucketResult element")
    # an element with no children parses to None
    result = parsed["ListBucketResult"] or {}
    if not isinstance(result, dict):
        raise MalformedResponseError("ListBucketResult element has no child elements")

    contents = [
        Content(
            key=entry.get("Key") or "",
            size=_int(entry.get("Size"), "Size", "ListBucket"),
            last_sequence_id=_int(entry.get("LastSequenceId"), "LastSequenceId", "ListBucket"),
            etag=entry.get("ETag") or "",
            last_modified=entry.get("LastModified") or "",
        )
        for entry in _xml_entries(result.get("Contents"), "Contents")
    ]
    prefixes = [
        CommonPrefix(prefix=entry.get("Prefix") or "")
        for entry in _xml_entries(result.get("CommonPrefixes"), "CommonPrefixes")
    ]
    return ListBucketOutput(
        name=result.get("Name") or "",
        next_marker=result.get("NextMarker") or "",
        max_keys=_int(result.get("MaxKeys"), "MaxKeys", "ListBucket"),
        contents=contents,
        common_prefixes=prefixes,
    )
