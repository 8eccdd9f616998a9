from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests
from requests.exceptions import RequestException

from .exceptions import TransportError

logger = logging.getLogger("v3io_http.session")


class Response:
    """Raw response body plus the typed output decoded from it.

    A response belongs to the call that produced it. Callers release it when
    done, either explicitly or by using it as a context manager.
    """

    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
        output: Any = None,
    ) -> None:
        self._body: Optional[bytes] = body
        self.status_code = status_code
        self.headers: Dict[str, str] = dict(headers or {})
        self.output = output

    @property
    def body(self) -> bytes:
        if self._body is None:
            raise ValueError("Response was already released")
        return self._body

    @property
    def released(self) -> bool:
        return self._body is None

    def release(self) -> None:
        self._body = None
        self.output = None

    def __enter__(self) -> "Response":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self) -> str:
        state = "released" if self.released else f"{len(self._body or b'')} bytes"
        return f"<Response [{self.status_code}] {state}>"


class SyncSession:
    """Blocking HTTP transport shared by the containers of one cluster.

    Connection handling is left to ``requests``; no retries are attempted.
    """

    def __init__(
        self,
        http: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._http = http or requests.Session()
        self._timeout = timeout

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
    ) -> Response:
        """Issue one request and return its response.

        Raises
        ------
        TransportError
            On connection failure, timeout, or a non-2xx status.
        """
        logger.debug("Sending request: %s", {"method": method, "url": url, "headers": dict(headers or {})})
        try:
            res = self._http.request(
                method,
                url,
                headers=dict(headers or {}),
                data=body,
                timeout=self._timeout,
            )
        except RequestException as exc:
            raise TransportError(f"Failed to send {method} {url}: {exc}") from exc

        if not 200 <= res.status_code < 300:
            raise TransportError(
                f"Failed to send {method} {url}: status {res.status_code}",
                status_code=res.status_code,
                body=res.content,
            )

        return Response(body=res.content, status_code=res.status_code, headers=res.headers)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "SyncSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
