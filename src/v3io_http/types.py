from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

Item = Dict[str, Any]
WireItem = Dict[str, Dict[str, str]]

UPDATE_MODE_CREATE_OR_REPLACE = "CreateOrReplaceAttributes"


# ---------- Objects ----------
@dataclass
class Content:
    key: str
    size: int = 0
    last_sequence_id: int = 0
    etag: str = ""
    last_modified: str = ""


@dataclass
class CommonPrefix:
    prefix: str


@dataclass
class ListBucketInput:
    path: str = ""


@dataclass
class ListBucketOutput:
    name: str = ""
    next_marker: str = ""
    max_keys: int = 0
    contents: List[Content] = field(default_factory=list)
    common_prefixes: List[CommonPrefix] = field(default_factory=list)


@dataclass
class GetObjectInput:
    path: str


@dataclass
class PutObjectInput:
    path: str
    body: bytes = b""


@dataclass
class DeleteObjectInput:
    path: str


# ---------- Items ----------
@dataclass
class GetItemInput:
    path: str
    attribute_names: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class GetItemOutput:
    item: Item


@dataclass
class GetItemsInput:
    """Scan of a table directory.

    Empty strings and zero values mean "not set" and are left out of the
    request body. ``segment`` is only sent together with ``total_segments``.
    """

    path: str
    attribute_names: List[str] = field(default_factory=lambda: ["*"])
    filter: str = ""
    marker: str = ""
    sharding_key: str = ""
    limit: int = 0
    total_segments: int = 0
    segment: int = 0
    sort_key_range_start: str = ""
    sort_key_range_end: str = ""


@dataclass
class GetItemsOutput:
    items: List[Item] = field(default_factory=list)
    next_marker: str = ""
    last: bool = False
    # Set when a non-final page did not advance the marker.
    anomaly: bool = False


@dataclass
class PutItemInput:
    path: str
    attributes: Item
    condition: str = ""


@dataclass
class PutItemsInput:
    path: str
    items: Dict[str, Item]
    condition: str = ""


@dataclass
class PutItemsOutput:
    success: bool = True
    errors: Dict[str, Exception] = field(default_factory=dict)


@dataclass
class UpdateItemInput:
    """Either ``attributes`` (replace wholesale) or ``expression``, not both."""

    path: str
    attributes: Optional[Item] = None
    expression: Optional[str] = None
    condition: str = ""


# ---------- Streams ----------
@dataclass
class CreateStreamInput:
    path: str
    shard_count: int
    retention_period_hours: int


@dataclass
class DeleteStreamInput:
    path: str


@dataclass
class ShardDeletion:
    key: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DeleteStreamOutput:
    shards: List[ShardDeletion] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(s.ok for s in self.shards)

    @property
    def failed(self) -> List[ShardDeletion]:
        return [s for s in self.shards if not s.ok]


@dataclass
class Record:
    data: bytes
    client_info: Optional[bytes] = None
    shard_id: Optional[int] = None
    partition_key: str = ""


@dataclass
class PutRecordsInput:
    path: str
    records: List[Record]


@dataclass
class PutRecordResult:
    sequence_number: int = 0
    shard_id: int = 0
    error_code: int = 0
    error_message: str = ""


@dataclass
class PutRecordsOutput:
    failed_record_count: int = 0
    records: List[PutRecordResult] = field(default_factory=list)


class SeekShardType(Enum):
    TIME = "TIME"
    SEQUENCE = "SEQUENCE"
    LATEST = "LATEST"
    EARLIEST = "EARLIEST"


@dataclass
class SeekShardInput:
    path: str
    type: SeekShardType
    starting_sequence_number: int = 0
    timestamp: int = 0


@dataclass
class SeekShardOutput:
    location: str = ""


@dataclass
class GetRecordsInput:
    path: str
    location: str
    limit: int


@dataclass
class GetRecordsResult:
    arrival_time_sec: int = 0
    arrival_time_nsec: int = 0
    sequence_number: int = 0
    client_info: Optional[bytes] = None
    partition_key: str = ""
    data: bytes = b""


@dataclass
class GetRecordsOutput:
    next_location: str = ""
    msec_behind_latest: int = 0
    records_behind_latest: int = 0
    records: List[GetRecordsResult] = field(default_factory=list)
