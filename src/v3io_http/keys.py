from __future__ import annotations

import posixpath
from typing import Optional, Union


def join_path(*parts: Optional[Union[str, int]]) -> str:
    """Join path segments with single slashes, skipping empty parts.

    A trailing slash on the last part is kept since v3io uses it to address
    directories.
    """
    kept = [str(p) for p in parts if p is not None and p != ""]
    if not kept:
        return ""
    trailing = kept[-1].endswith("/")
    joined = "/".join(p.strip("/") for p in kept if p.strip("/"))
    if trailing and joined:
        joined += "/"
    return joined


def item_path(table_path: str, item_key: str) -> str:
    """Path of a single item under a table directory.

    Example: ``item_path("users", "alice") -> "users/alice"``
    """
    return join_path(table_path, item_key)


def shard_path(stream_path: str, shard_id: int) -> str:
    """Path of a shard object under a stream directory.

    Example: ``shard_path("events/", 2) -> "events/2"``
    """
    return join_path(stream_path, shard_id)


def stream_parent(stream_path: str) -> str:
    """Directory object that holds a stream, with a trailing slash.

    ``"events/"`` -> ``"events/"``, ``"a/b"`` -> ``"a/"``, ``"b"`` -> ``"./"``
    """
    parent = posixpath.dirname(stream_path)
    parent = posixpath.normpath(parent) if parent else "."
    return parent + "/"


def list_bucket_query(prefix: str) -> str:
    """Query string suffix for a prefix-filtered bucket listing."""
    return f"?prefix={prefix}" if prefix else ""
