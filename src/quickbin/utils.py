"""
Utility functions for low-level value packing and length-prefix handling.
"""

import struct
import sys
import warnings
from datetime import datetime, timedelta, timezone
from typing import Union

from .constants import (
    FLOAT32_MAX,
    INTEGER_RANGES,
    PRIMITIVE_FORMATS,
    TICKS_PER_DAY,
    TICKS_PER_MICROSECOND,
    TICKS_PER_SECOND,
    SizePrefixPolicy,
    StringSizeUnit,
)


class SizeOverflowError(ValueError):
    """
    Raised when a length prefix cannot hold the element count under the strict policy.
    """

    def __init__(self, count: int, prefix: str) -> None:
        lo, hi = INTEGER_RANGES[prefix]
        super().__init__(
            f"Count {count} does not fit a {prefix} size prefix ({lo} to {hi})"
        )
        self.count = count
        self.prefix = prefix


def check_int_range(kind: str, number: int) -> None:
    """Raises if number is not an int representable as kind."""
    # bool is an int subclass but never a valid integer payload here
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError(f"Expected int for {kind}, got {type(number).__name__}")
    lo, hi = INTEGER_RANGES[kind]
    if not lo <= number <= hi:
        raise ValueError(f"Value {number} out of {kind} range ({lo} to {hi})")


def pack_value(order: str, kind: str, value: Union[int, float]) -> bytes:
    """
    Encodes a fixed-width value.

    Args:
        order: struct byte order character, "<" or ">"
        kind: A key of PRIMITIVE_FORMATS, e.g. "int16"
        value: The number to encode
    """
    if kind in INTEGER_RANGES:
        check_int_range(kind, value)
    elif not isinstance(value, (int, float)) or isinstance(value, bool):
        raise TypeError(f"Expected float for {kind}, got {type(value).__name__}")
    try:
        return struct.pack(order + PRIMITIVE_FORMATS[kind], value)
    except OverflowError as e:
        # Finite values that round past the format maximum; inf and nan still pack
        limit = FLOAT32_MAX if kind == "float32" else sys.float_info.max
        raise ValueError(f"Value {value} out of {kind} range (-{limit} to {limit})") from e


def wrap_to_width(number: int, kind: str) -> int:
    """
    Narrows number to kind with two's-complement wraparound, like an unchecked cast.
    """
    lo, hi = INTEGER_RANGES[kind]
    span = hi - lo + 1
    wrapped = number & (span - 1)
    if lo < 0 and wrapped > hi:
        wrapped -= span
    return wrapped


def narrow_count(
    count: int, kind: str, policy: SizePrefixPolicy, stacklevel: int = 2
) -> int:
    """
    Returns the value to store in a size prefix of type kind.

    Args:
        count: The element count
        kind: Integer kind of the prefix
        policy: What to do if count does not fit
        stacklevel: Passed to warnings.warn, counted from this function

    Raises:
        SizeOverflowError: If count does not fit and policy is STRICT
    """
    lo, hi = INTEGER_RANGES[kind]
    if lo <= count <= hi:
        return count

    if policy == SizePrefixPolicy.STRICT:
        raise SizeOverflowError(count, kind)

    wrapped = wrap_to_width(count, kind)
    if policy == SizePrefixPolicy.WARN:
        warnings.warn(
            f"Count {count} truncated to {wrapped} by a {kind} size prefix",
            RuntimeWarning,
            stacklevel=stacklevel,
        )
    return wrapped


def string_count(text: str, encoded: bytes, unit: StringSizeUnit) -> int:
    """
    Returns the count written in front of a size-prefixed string.
    """
    if unit == StringSizeUnit.UTF16_UNITS:
        # Code points above the BMP take a surrogate pair
        return len(text) + sum(1 for c in text if ord(c) > 0xFFFF)
    if unit == StringSizeUnit.CODE_POINTS:
        return len(text)
    return len(encoded)


def datetime_to_ticks(value: datetime) -> int:
    """
    Converts a datetime to 100ns ticks since 0001-01-01T00:00:00.
    Aware datetimes are converted to UTC first, naive ones are used as-is.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    seconds = value.hour * 3600 + value.minute * 60 + value.second
    return (
        (value.toordinal() - 1) * TICKS_PER_DAY
        + seconds * TICKS_PER_SECOND
        + value.microsecond * TICKS_PER_MICROSECOND
    )


def timedelta_to_ticks(value: timedelta) -> int:
    """
    Converts a timedelta to a signed count of 100ns ticks.
    """
    return (
        value.days * TICKS_PER_DAY
        + value.seconds * TICKS_PER_SECOND
        + value.microseconds * TICKS_PER_MICROSECOND
    )
