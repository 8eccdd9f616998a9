from __future__ import annotations

import logging
from typing import Any, Callable

from . import builders, decoders
from .builders import PreparedRequest
from .cursor import ItemsCursor
from .exceptions import V3ioError
from .keys import item_path, stream_parent
from .session import Response, SyncSession
from .types import (
    CreateStreamInput,
    DeleteObjectInput,
    DeleteStreamInput,
    DeleteStreamOutput,
    GetItemInput,
    GetItemsInput,
    GetObjectInput,
    GetRecordsInput,
    ListBucketInput,
    ListBucketOutput,
    PutItemInput,
    PutItemsInput,
    PutItemsOutput,
    PutObjectInput,
    PutRecordsInput,
    SeekShardInput,
    ShardDeletion,
    UpdateItemInput,
)

logger = logging.getLogger("v3io_http.container")


class SyncContainer:
    """Blocking access to the objects, items and streams of one container.

    Every call sends its request(s) through the shared session and waits for
    the answer. Read operations return a ``Response`` whose ``output`` holds
    the decoded result; callers release it when done. Write operations
    return ``None`` and raise on failure.

    Errors
    ------
    TransportError
        Connection failure, timeout or non-2xx status, passed through as is.
    SerializationError
        The request could not be built; nothing was sent.
    MalformedResponseError
        The request was sent but its answer could not be decoded.
    """

    def __init__(
        self,
        session: SyncSession,
        cluster_url: str,
        alias: str,
        strict_decode: bool = True,
    ) -> None:
        self._session = session
        self.alias = alias
        self.strict_decode = strict_decode
        self.uri_prefix = f"http://{cluster_url}/{alias}"
        self._logger = logger.getChild(alias)

    def _uri(self, path: str) -> str:
        return f"{self.uri_prefix}/{path}"

    def _send(self, request: PreparedRequest) -> Response:
        return self._session.send(
            request.method,
            self._uri(request.path),
            request.headers or None,
            request.body,
        )

    @staticmethod
    def _decode(response: Response, decode: Callable[[bytes], Any]) -> Response:
        # the response is released if its body cannot be decoded
        try:
            response.output = decode(response.body)
        except Exception:
            response.release()
            raise
        return response

    # ---------- Objects ----------
    def list_bucket(self, request: ListBucketInput) -> Response:
        prepared = builders.build_list_bucket(request)
        response = self._session.send(prepared.method, self.uri_prefix + prepared.path)
        return self._decode(response, decoders.decode_list_bucket)

    def get_object(self, request: GetObjectInput) -> Response:
        return self._send(builders.build_get_object(request))

    def put_object(self, request: PutObjectInput) -> None:
        self._send(builders.build_put_object(request)).release()

    def delete_object(self, request: DeleteObjectInput) -> None:
        self._send(builders.build_delete_object(request)).release()

    # ---------- Items ----------
    def get_item(self, request: GetItemInput) -> Response:
        response = self._send(builders.build_get_item(request))
        return self._decode(response, lambda body: decoders.decode_get_item(body, strict=self.strict_decode))

    def get_items(self, request: GetItemsInput) -> Response:
        """Fetch a single page of a scan. See ``get_items_cursor`` for all pages."""
        response = self._send(builders.build_get_items(request))
        return self._decode(
            response,
            lambda body: decoders.decode_get_items(body, sent_marker=request.marker, strict=self.strict_decode),
        )

    def get_items_cursor(self, request: GetItemsInput) -> ItemsCursor:
        return ItemsCursor(self, request)

    def put_item(self, request: PutItemInput) -> None:
        prepared = builders.build_put_item(request.path, request.attributes, request.condition)
        self._send(prepared).release()

    def put_items(self, request: PutItemsInput) -> Response:
        """Put each item independently under ``<path>/<key>``.

        A failing item does not stop the batch. Its error is recorded under its
        key and ``success`` is cleared.
        """
        output = PutItemsOutput(success=True)
        for item_key, attributes in request.items.items():
            try:
                prepared = builders.build_put_item(item_path(request.path, item_key), attributes, request.condition)
                self._send(prepared).release()
            except V3ioError as exc:
                self._logger.warning("Failed to put item: %s", {"key": item_key, "error": str(exc)})
                output.errors[item_key] = exc
                output.success = False
        return Response(output=output)

    def update_item(self, request: UpdateItemInput) -> None:
        self._send(builders.build_update_item(request)).release()

    # ---------- Streams ----------
    def create_stream(self, request: CreateStreamInput) -> None:
        self._send(builders.build_create_stream(request)).release()

    def delete_stream(self, request: DeleteStreamInput) -> Response:
        """Delete every shard of a stream, then the stream directory itself.

        Shard deletions are best effort: each outcome is reported in the
        output and the remaining shards are still attempted. A failure to list
        the shards or to delete the directory is raised.
        """
        listing = self.list_bucket(ListBucketInput(path=request.path))
        try:
            bucket: ListBucketOutput = listing.output
            keys = [content.key for content in bucket.contents]
        finally:
            listing.release()

        output = DeleteStreamOutput()
        for key in keys:
            try:
                self.delete_object(DeleteObjectInput(path=key))
                output.shards.append(ShardDeletion(key=key))
            except V3ioError as exc:
                self._logger.warning("Failed to delete shard: %s", {"key": key, "error": str(exc)})
                output.shards.append(ShardDeletion(key=key, error=exc))

        self.delete_object(DeleteObjectInput(path=stream_parent(request.path)))
        return Response(output=output)

    def put_records(self, request: PutRecordsInput) -> Response:
        return self._decode(self._send(builders.build_put_records(request)), decoders.decode_put_records)

    def seek_shard(self, request: SeekShardInput) -> Response:
        return self._decode(self._send(builders.build_seek_shard(request)), decoders.decode_seek_shard)

    def get_records(self, request: GetRecordsInput) -> Response:
        return self._decode(self._send(builders.build_get_records(request)), decoders.decode_get_records)
