from __future__ import annotations

import json

import pytest

from conftest import page
from v3io_http import builders
from v3io_http.exceptions import (
    MalformedResponseError,
    TransportError,
    UnsupportedAttributeTypeError,
)
from v3io_http.types import (
    CreateStreamInput,
    DeleteObjectInput,
    DeleteStreamInput,
    GetItemInput,
    GetItemsInput,
    GetObjectInput,
    GetRecordsInput,
    ListBucketInput,
    PutItemInput,
    PutItemsInput,
    PutObjectInput,
    PutRecordsInput,
    Record,
    SeekShardInput,
    SeekShardType,
    UpdateItemInput,
)

PREFIX = "http://cluster:8081/bigdata"


def _listing(*keys: str) -> bytes:
    contents = "".join(f"<Contents><Key>{k}</Key></Contents>" for k in keys)
    return f"<ListBucketResult><Name>bigdata</Name>{contents}</ListBucketResult>".encode()


def test_object_operations(make_container):
    container, session = make_container([b"payload", b"", b""])

    response = container.get_object(GetObjectInput(path="dir/obj"))
    container.put_object(PutObjectInput(path="dir/obj", body=b"data"))
    container.delete_object(DeleteObjectInput(path="dir/obj"))

    assert response.body == b"payload"
    assert [(c["method"], c["url"]) for c in session.calls] == [
        ("GET", f"{PREFIX}/dir/obj"),
        ("PUT", f"{PREFIX}/dir/obj"),
        ("DELETE", f"{PREFIX}/dir/obj"),
    ]
    assert session.calls[1]["body"] == b"data"
    assert session.responses[1].released
    assert session.responses[2].released


def test_list_bucket_uses_prefix_query(make_container):
    container, session = make_container([_listing("events/0", "events/1")])

    with container.list_bucket(ListBucketInput(path="events/")) as response:
        assert [c.key for c in response.output.contents] == ["events/0", "events/1"]

    assert session.calls[0]["url"] == f"{PREFIX}?prefix=events/"
    assert session.responses[0].released


def test_get_item(make_container):
    body = json.dumps({"Item": {"age": {"N": "30"}, "pic": {"B": "QUI="}}}).encode()
    container, session = make_container([body])

    response = container.get_item(GetItemInput(path="users/alice", attribute_names=["age", "pic"]))

    assert response.output.item == {"age": 30, "pic": b"AB"}
    call = session.calls[0]
    assert (call["method"], call["url"]) == ("PUT", f"{PREFIX}/users/alice")
    assert call["headers"]["X-v3io-function"] == "GetItem"
    assert session.json_body(0) == {"AttributesToGet": "age,pic"}


def test_get_item_lenient_container_drops_unknown_tags(make_container):
    body = json.dumps({"Item": {"age": {"N": "30"}, "odd": {"Q": "1"}}}).encode()
    container, _ = make_container([body], strict_decode=False)

    assert container.get_item(GetItemInput(path="users/alice")).output.item == {"age": 30}


def test_malformed_response_is_released(make_container):
    container, session = make_container([b"<html>oops</html>"])

    with pytest.raises(MalformedResponseError):
        container.get_item(GetItemInput(path="users/alice"))

    assert session.responses[0].released


@pytest.mark.parametrize(
    "body",
    [
        b"<ListBucketResult>oops</ListBucketResult>",
        b"<ListBucketResult><Contents>x</Contents></ListBucketResult>",
    ],
)
def test_misshapen_listing_is_released(make_container, body: bytes):
    container, session = make_container([body])

    with pytest.raises(MalformedResponseError):
        container.list_bucket(ListBucketInput(path="events/"))

    assert session.responses[0].released


def test_delete_stream_stops_on_misshapen_listing(make_container):
    container, session = make_container([b"<ListBucketResult><Contents>x</Contents></ListBucketResult>"])

    with pytest.raises(MalformedResponseError):
        container.delete_stream(DeleteStreamInput(path="events/"))

    assert len(session.calls) == 1
    assert session.responses[0].released


def test_unexpected_decode_error_releases_response(make_container):
    container, session = make_container([b"{}"])

    def explode(body: bytes):
        raise KeyError("Item")

    with pytest.raises(KeyError):
        container._decode(container._send(builders.build_get_object(GetObjectInput(path="x"))), explode)

    assert session.responses[0].released


def test_get_items_single_page(make_container):
    container, session = make_container([page([{"a": {"S": "x"}}], next_marker="m2")])

    output = container.get_items(GetItemsInput(path="users/", marker="m1", limit=5)).output

    assert output.items == [{"a": "x"}]
    assert output.next_marker == "m2"
    assert session.json_body(0) == {"AttributesToGet": "*", "Marker": "m1", "Limit": 5}


def test_put_item(make_container):
    container, session = make_container()

    container.put_item(PutItemInput(path="users/alice", attributes={"age": 30}, condition="age < 30"))

    assert session.calls[0]["headers"]["X-v3io-function"] == "PutItem"
    assert session.json_body(0) == {"Item": {"age": {"N": "30"}}, "ConditionExpression": "age < 30"}


def test_put_item_unsupported_value_sends_nothing(make_container):
    container, session = make_container()

    with pytest.raises(UnsupportedAttributeTypeError):
        container.put_item(PutItemInput(path="users/alice", attributes={"when": object()}))

    assert session.calls == []


def test_put_items_reports_partial_failure(make_container):
    container, session = make_container()

    response = container.put_items(
        PutItemsInput(
            path="users",
            items={
                "k1": {"age": 1},
                "k2": {"age": object()},
                "k3": {"age": 3},
            },
        )
    )

    output = response.output
    assert output.success is False
    assert list(output.errors) == ["k2"]
    assert isinstance(output.errors["k2"], UnsupportedAttributeTypeError)
    assert [c["url"] for c in session.calls] == [f"{PREFIX}/users/k1", f"{PREFIX}/users/k3"]


def test_put_items_records_transport_failures(make_container):
    container, session = make_container([b"", TransportError("conflict", status_code=409), b""])

    output = container.put_items(
        PutItemsInput(path="users", items={"a": {"x": 1}, "b": {"x": 2}, "c": {"x": 3}}, condition="x > 0")
    ).output

    assert output.success is False
    assert set(output.errors) == {"b"}
    assert output.errors["b"].status_code == 409
    assert len(session.calls) == 3
    assert all(json.loads(c["body"])["ConditionExpression"] == "x > 0" for c in session.calls)


def test_put_items_all_succeed(make_container):
    container, _ = make_container()

    output = container.put_items(PutItemsInput(path="users", items={"a": {"x": 1}})).output

    assert output.success is True
    assert output.errors == {}


def test_update_item_forms(make_container):
    container, session = make_container()

    container.update_item(UpdateItemInput(path="users/alice", attributes={"age": 31}))
    container.update_item(UpdateItemInput(path="users/alice", expression="age = age + 1"))

    assert session.calls[0]["method"] == "PUT"
    assert session.json_body(0)["UpdateMode"] == "CreateOrReplaceAttributes"
    assert session.calls[1]["method"] == "POST"
    assert session.calls[1]["headers"]["X-v3io-function"] == "UpdateItem"


def test_transport_error_propagates_unchanged(make_container):
    error = TransportError("timeout")
    container, _ = make_container([error])

    with pytest.raises(TransportError) as info:
        container.get_item(GetItemInput(path="users/alice"))

    assert info.value is error


def test_create_stream(make_container):
    container, session = make_container()

    container.create_stream(CreateStreamInput(path="events/", shard_count=2, retention_period_hours=1))

    assert session.calls[0]["url"] == f"{PREFIX}/events/"
    assert session.json_body(0) == {"ShardCount": 2, "RetentionPeriodHours": 1}


def test_delete_stream_removes_shards_then_directory(make_container):
    container, session = make_container([_listing("events/0", "events/1")])

    output = container.delete_stream(DeleteStreamInput(path="events/")).output

    assert output.success is True
    assert [s.key for s in output.shards] == ["events/0", "events/1"]
    assert [(c["method"], c["url"]) for c in session.calls] == [
        ("GET", f"{PREFIX}?prefix=events/"),
        ("DELETE", f"{PREFIX}/events/0"),
        ("DELETE", f"{PREFIX}/events/1"),
        ("DELETE", f"{PREFIX}/events/"),
    ]
    assert session.responses[0].released


def test_delete_stream_continues_past_shard_failures(make_container):
    error = TransportError("busy", status_code=500)
    container, session = make_container([_listing("events/0", "events/1", "events/2"), b"", error, b"", b""])

    output = container.delete_stream(DeleteStreamInput(path="events/")).output

    assert output.success is False
    assert [s.key for s in output.failed] == ["events/1"]
    assert output.failed[0].error is error
    assert len(session.calls) == 5


def test_delete_stream_raises_when_directory_delete_fails(make_container):
    container, _ = make_container([_listing("events/0"), b"", TransportError("denied", status_code=403)])

    with pytest.raises(TransportError):
        container.delete_stream(DeleteStreamInput(path="events/"))


def test_delete_stream_raises_when_listing_fails(make_container):
    container, session = make_container([TransportError("no such stream", status_code=404)])

    with pytest.raises(TransportError):
        container.delete_stream(DeleteStreamInput(path="events/"))

    assert len(session.calls) == 1


def test_put_records(make_container):
    body = json.dumps({"FailedRecordCount": 0, "Records": [{"SequenceNumber": 1, "ShardId": 2}]}).encode()
    container, session = make_container([body])

    response = container.put_records(
        PutRecordsInput(path="events/", records=[Record(data=b"AB", shard_id=2, partition_key="k")])
    )

    assert response.output.records[0].shard_id == 2
    assert session.calls[0]["headers"]["X-v3io-function"] == "PutRecords"
    assert session.json_body(0) == {"Records": [{"Data": "QUI=", "ShardId": 2, "PartitionKey": "k"}]}


def test_seek_then_get_records(make_container):
    container, session = make_container(
        [
            json.dumps({"Location": "loc1"}).encode(),
            json.dumps({"NextLocation": "loc2", "Records": [{"SequenceNumber": 5, "Data": "QUI="}]}).encode(),
        ]
    )

    location = container.seek_shard(SeekShardInput(path="events/0", type=SeekShardType.EARLIEST)).output.location
    records = container.get_records(GetRecordsInput(path="events/0", location=location, limit=10)).output

    assert location == "loc1"
    assert records.next_location == "loc2"
    assert records.records[0].data == b"AB"
    assert session.json_body(0) == {"Type": "EARLIEST"}
    assert session.json_body(1) == {"Location": "loc1", "Limit": 10}
