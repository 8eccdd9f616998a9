"""
Paginated item scan.

The cursor walks a GetItems scan one page at a time:

  READY(marker) -> FETCHING -> READY(next marker) | EXHAUSTED | FAILED

EXHAUSTED and FAILED are terminal; advancing from them sends nothing. A page
that is not the last one but repeats or blanks the marker ends the scan as
EXHAUSTED with ``anomaly`` set, so the same request is never sent twice.
Failed fetches are not retried here.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional

import pandas as pd  # type: ignore[import]

from .exceptions import V3ioError
from .types import GetItemsInput, GetItemsOutput, Item

if TYPE_CHECKING:
    from .container import SyncContainer
    from .session import Response

logger = logging.getLogger("v3io_http.cursor")


class CursorState(Enum):
    READY = "ready"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class ItemsCursor:
    """Sequential iterator over the items of a scan.

    Not safe for concurrent use; share it across threads only with external
    locking.
    """

    def __init__(self, container: "SyncContainer", request: GetItemsInput) -> None:
        self._container = container
        self._request = request
        self._marker = request.marker
        self._state = CursorState.READY
        self._error: Optional[Exception] = None
        self._response: Optional["Response"] = None
        self._items: List[Item] = []
        self._index = 0
        self.anomaly = False
        self.pages = 0

    # ---------- State ----------
    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def marker(self) -> str:
        """Marker the next fetch will be sent with."""
        return self._marker

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def done(self) -> bool:
        return self._state in (CursorState.EXHAUSTED, CursorState.FAILED)

    # ---------- Paging ----------
    def advance(self) -> List[Item]:
        """Fetch the next page and return its items.

        Returns an empty list without sending anything once the cursor is
        exhausted or failed. The error of a failed fetch is raised once and
        kept in ``error``.
        """
        if self.done:
            return []
        items = self._fetch()
        # handed to the caller, not buffered for next_item()
        self._index = len(self._items)
        return items

    def _fetch(self) -> List[Item]:
        self._state = CursorState.FETCHING
        self.release()
        try:
            response = self._container.get_items(replace(self._request, marker=self._marker))
        except V3ioError as exc:
            self._state = CursorState.FAILED
            self._error = exc
            logger.debug("GetItems fetch failed: %s", {"path": self._request.path, "marker": self._marker})
            raise

        self._response = response
        output: GetItemsOutput = response.output
        self.pages += 1

        if output.last:
            self._state = CursorState.EXHAUSTED
        elif output.anomaly:
            self.anomaly = True
            self._state = CursorState.EXHAUSTED
        else:
            self._marker = output.next_marker
            self._state = CursorState.READY

        self._items = list(output.items)
        self._index = 0
        return list(self._items)

    # ---------- Item iteration ----------
    def next_item(self) -> Optional[Item]:
        """Return the next item, fetching pages as needed; ``None`` at the end."""
        while self._index >= len(self._items):
            if self.done:
                return None
            self._fetch()
        item = self._items[self._index]
        self._index += 1
        return item

    def __iter__(self) -> Iterator[Item]:
        return self

    def __next__(self) -> Item:
        item = self.next_item()
        if item is None:
            raise StopIteration
        return item

    def all(self) -> List[Item]:
        """Collect every remaining item. Raises the stored error of a failed cursor."""
        items = list(self)
        if self._state is CursorState.FAILED and self._error is not None:
            raise self._error
        return items

    def to_dataframe(self, columns: Optional[List[str]] = None) -> pd.DataFrame:
        """Collect every remaining item into a DataFrame, one row per item."""
        df = pd.DataFrame(self.all())
        if columns:
            existing_cols = [c for c in columns if c in df.columns]
            return df[existing_cols]
        return df

    # ---------- Resources ----------
    def release(self) -> None:
        """Release the response of the current page."""
        if self._response is not None:
            self._response.release()
            self._response = None

    def __enter__(self) -> "ItemsCursor":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
