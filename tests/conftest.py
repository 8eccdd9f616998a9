from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from v3io_http.container import SyncContainer
from v3io_http.session import Response

Reply = Union[bytes, Exception, Callable[[str, str], Union[bytes, Exception]]]


class FakeSession:
    """Stands in for SyncSession; records requests and plays back replies."""

    def __init__(self, replies: Optional[List[Reply]] = None) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[Response] = []
        self._replies = list(replies or [])

    def send(self, method: str, url: str, headers=None, body=None) -> Response:
        self.calls.append({"method": method, "url": url, "headers": dict(headers or {}), "body": body})
        reply: Reply = self._replies.pop(0) if self._replies else b""
        if callable(reply):
            reply = reply(method, url)
        if isinstance(reply, Exception):
            raise reply
        response = Response(body=reply)
        self.responses.append(response)
        return response

    def json_body(self, index: int) -> Any:
        return json.loads(self.calls[index]["body"])


def page(items: List[Dict[str, Any]], next_marker: str = "", last: bool = False) -> bytes:
    return json.dumps(
        {
            "Items": items,
            "NextMarker": next_marker,
            "LastItemIncluded": "TRUE" if last else "FALSE",
        }
    ).encode()


@pytest.fixture
def make_container():
    def _make(replies: Optional[List[Reply]] = None, strict_decode: bool = True):
        session = FakeSession(replies)
        return SyncContainer(session, "cluster:8081", "bigdata", strict_decode=strict_decode), session  # type: ignore[arg-type]

    return _make
