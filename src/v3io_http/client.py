from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .container import SyncContainer
from .exceptions import ConfigurationError
from .session import SyncSession

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class V3ioConfig:
    """Immutable configuration for container access.

    Attributes
    ----------
    cluster_url: Optional[str]
        ``host[:port]`` of the web API; falls back to ``V3IO_API``.
    container: Optional[str]
        Container alias; falls back to ``V3IO_CONTAINER``.
    timeout: Optional[float]
        Per-request timeout in seconds; falls back to ``V3IO_TIMEOUT``.
    strict_decode: Optional[bool]
        Reject item attributes without a known type tag instead of dropping
        them; falls back to ``V3IO_STRICT_DECODE``, default on.
    """

    cluster_url: Optional[str] = None
    container: Optional[str] = None
    timeout: Optional[float] = None
    strict_decode: Optional[bool] = None


def _resolve_cluster_url(explicit: Optional[str]) -> str:
    url = explicit or os.getenv("V3IO_API")
    if not url:
        raise ConfigurationError("No cluster URL given and V3IO_API is not set")
    # URIs are built as http://<cluster>/<container>
    for scheme in ("http://", "https://"):
        if url.startswith(scheme):
            url = url[len(scheme):]
    return url.rstrip("/")


def _resolve_container(explicit: Optional[str]) -> str:
    container = explicit or os.getenv("V3IO_CONTAINER")
    if not container:
        raise ConfigurationError("No container given and V3IO_CONTAINER is not set")
    return container.strip("/")


def _resolve_timeout(explicit: Optional[float]) -> Optional[float]:
    if explicit is not None:
        return explicit
    raw = os.getenv("V3IO_TIMEOUT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid V3IO_TIMEOUT: {raw!r}") from exc


def _resolve_strict_decode(explicit: Optional[bool]) -> bool:
    if explicit is not None:
        return explicit
    raw = os.getenv("V3IO_STRICT_DECODE")
    if raw is None or raw == "":
        return True
    return raw.strip().lower() not in _FALSE_VALUES


def get_container(config: V3ioConfig, session: Optional[SyncSession] = None) -> SyncContainer:
    """Create a container facade from configuration.

    Notes
    -----
    A new ``SyncSession`` is created when none is passed. Pass one explicitly
    to share connections between containers of the same cluster.
    """
    cluster_url = _resolve_cluster_url(config.cluster_url)
    alias = _resolve_container(config.container)
    if session is None:
        session = SyncSession(timeout=_resolve_timeout(config.timeout))
    return SyncContainer(
        session,
        cluster_url,
        alias,
        strict_decode=_resolve_strict_decode(config.strict_decode),
    )
