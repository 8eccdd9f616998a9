from __future__ import annotations

from typing import Optional


class V3ioError(RuntimeError):
    """Base class for errors raised by the v3io access layer."""

    pass


class ConfigurationError(V3ioError):
    """Raised when the cluster or container cannot be resolved."""

    pass


class TransportError(V3ioError):
    """Raised when a request fails in transit or with a non-success status.

    Wraps lower-level ``requests`` exceptions; ``status_code`` and ``body`` are
    set when the server answered.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: bytes = b"",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SerializationError(V3ioError):
    """Raised when a request body cannot be built. No request was sent."""

    pass


class UnsupportedAttributeTypeError(SerializationError):
    def __init__(self, name: str, value: object) -> None:
        self.name = name
        self.kind = type(value).__name__
        super().__init__(f"Unexpected attribute type for {name}: {self.kind}")


class MalformedResponseError(V3ioError):
    """Raised when a response body does not have the expected shape."""

    pass


class MalformedAttributeError(MalformedResponseError):
    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Malformed attribute {name}: {message}")


class MalformedNumericAttributeError(MalformedAttributeError):
    def __init__(self, name: str, text: str) -> None:
        self.text = text
        super().__init__(name, f"value is not int or float: {text!r}")


class MalformedBinaryAttributeError(MalformedAttributeError):
    def __init__(self, name: str, text: str) -> None:
        self.text = text
        super().__init__(name, f"value is not valid base64: {text!r}")
