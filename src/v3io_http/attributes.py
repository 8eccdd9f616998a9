"""
Attribute codec (typed wire format).

Items travel with every value wrapped in a single-letter type tag:

  {"age": 30, "name": "foo", "blob": b"AB"}
  ->
  {"age": {"N": "30"}, "name": {"S": "foo"}, "blob": {"B": "QUI="}}

Numbers are always sent as text. Integers use plain decimal digits, floats use
upper-case exponential notation with the shortest mantissa that round-trips
(1.5 -> "1.5E+00"), which is the form the service has always received.
"""
from __future__ import annotations

import base64
import binascii
import logging
import math
import numbers
import re
from decimal import Decimal
from typing import Any, Dict, Mapping

from .exceptions import (
    MalformedAttributeError,
    MalformedBinaryAttributeError,
    MalformedNumericAttributeError,
    MalformedResponseError,
    UnsupportedAttributeTypeError,
)
from .types import Item, WireItem

logger = logging.getLogger("v3io_http.attributes")

NUMBER_TAG = "N"
STRING_TAG = "S"
BINARY_TAG = "B"

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def format_number(value: float) -> str:
    """Render a float as ``<mantissa>E<sign><two or more exponent digits>``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    # repr() yields the shortest digit string that parses back to the same float
    sign, digits, exponent = Decimal(repr(float(value))).normalize().as_tuple()
    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(str(d) for d in digits[1:])
    exponent += len(digits) - 1
    return f"{'-' if sign else ''}{mantissa}E{exponent:+03d}"


def encode_value(name: str, value: Any) -> Dict[str, str]:
    # bool is an int subclass but has no wire representation
    if isinstance(value, bool):
        raise UnsupportedAttributeTypeError(name, value)
    if isinstance(value, numbers.Integral):
        return {NUMBER_TAG: str(int(value))}
    if isinstance(value, numbers.Real):
        return {NUMBER_TAG: format_number(float(value))}
    if isinstance(value, str):
        return {STRING_TAG: value}
    if isinstance(value, (bytes, bytearray)):
        return {BINARY_TAG: base64.b64encode(bytes(value)).decode("ascii")}
    raise UnsupportedAttributeTypeError(name, value)


def encode_attributes(attributes: Mapping[str, Any]) -> WireItem:
    """Encode an item into its typed wire form.

    Raises
    ------
    UnsupportedAttributeTypeError
        If any value is not an int, float, str or bytes.
    """
    return {name: encode_value(name, value) for name, value in attributes.items()}


def _decode_number(name: str, text: str) -> Any:
    if _INT_PATTERN.fullmatch(text):
        return int(text)
    # float() accepts digit separators and surrounding blanks, the service never sends them
    if "_" not in text and text == text.strip():
        try:
            return float(text)
        except ValueError:
            pass
    raise MalformedNumericAttributeError(name, text)


def _decode_binary(name: str, text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedBinaryAttributeError(name, text) from exc


def decode_value(name: str, typed_value: Any) -> Any:
    """Decode one typed value. Returns ``None`` when no known tag is present."""
    if not isinstance(typed_value, Mapping):
        raise MalformedAttributeError(name, f"expected a typed value, got {type(typed_value).__name__}")

    for tag in (NUMBER_TAG, STRING_TAG, BINARY_TAG):
        if tag not in typed_value:
            continue
        text = typed_value[tag]
        # every tag carries its value as text
        if not isinstance(text, str):
            raise MalformedAttributeError(name, f"expected text under {tag!r}, got {type(text).__name__}")
        if tag == NUMBER_TAG:
            return _decode_number(name, text)
        if tag == BINARY_TAG:
            return _decode_binary(name, text)
        return text
    return None


def decode_attributes(wire_item: Any, strict: bool = True) -> Item:
    """Decode a typed wire item back into plain Python values.

    Tags are checked in the order N, S, B; the first one present wins. An
    attribute carrying none of them raises ``MalformedAttributeError`` when
    ``strict`` is set and is dropped otherwise.
    """
    if wire_item is None:
        return {}
    if not isinstance(wire_item, Mapping):
        raise MalformedResponseError(f"Expected an item object, got {type(wire_item).__name__}")

    attributes: Item = {}
    for name, typed_value in wire_item.items():
        value = decode_value(name, typed_value)
        if value is None:
            if strict:
                raise MalformedAttributeError(name, f"no known type tag in {sorted(typed_value)}")
            logger.debug("Dropping attribute without known type tag: %s", {"name": name, "tags": sorted(typed_value)})
            continue
        attributes[name] = value
    return attributes
