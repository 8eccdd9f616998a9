from __future__ import annotations

import pytest

from v3io_http.client import V3ioConfig, get_container
from v3io_http.exceptions import ConfigurationError


def test_explicit_config(monkeypatch):
    monkeypatch.delenv("V3IO_API", raising=False)
    monkeypatch.delenv("V3IO_STRICT_DECODE", raising=False)
    monkeypatch.delenv("V3IO_CONTAINER", raising=False)

    container = get_container(V3ioConfig(cluster_url="http://web-api:8081/", container="bigdata"))

    assert container.uri_prefix == "http://web-api:8081/bigdata"
    assert container.alias == "bigdata"
    assert container.strict_decode is True


def test_config_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("V3IO_API", "env-api:8081")
    monkeypatch.setenv("V3IO_CONTAINER", "users")
    monkeypatch.setenv("V3IO_STRICT_DECODE", "false")

    container = get_container(V3ioConfig())

    assert container.uri_prefix == "http://env-api:8081/users"
    assert container.strict_decode is False


def test_missing_cluster_is_an_error(monkeypatch):
    monkeypatch.delenv("V3IO_API", raising=False)

    with pytest.raises(ConfigurationError):
        get_container(V3ioConfig(container="bigdata"))


def test_missing_container_is_an_error(monkeypatch):
    monkeypatch.delenv("V3IO_CONTAINER", raising=False)

    with pytest.raises(ConfigurationError):
        get_container(V3ioConfig(cluster_url="api:8081"))


def test_invalid_timeout_is_an_error(monkeypatch):
    monkeypatch.setenv("V3IO_TIMEOUT", "soon")

    with pytest.raises(ConfigurationError):
        get_container(V3ioConfig(cluster_url="api:8081", container="bigdata"))
