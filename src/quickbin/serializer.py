from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Optional, TypeVar, Union

from .config import WriterConfig, get_writer_config
from .constants import SIZE_PREFIX_KINDS
from .utils import (
    check_int_range,
    datetime_to_ticks,
    narrow_count,
    pack_value,
    string_count,
    timedelta_to_ticks,
)
from .version import Version

T = TypeVar("T")

BytesLike = Union[bytes, bytearray, memoryview]


class ByteWriter:
    """
    Fluent in-memory binary encoder.
    Every write appends to an owned buffer and returns the writer, so calls can be chained:

        data = ByteWriter().write_int32(7).write_flag(True).write_byte_sized("hi").to_bytes()

    The output carries no type tags; a reader must know the exact sequence of writes.
    Not thread safe.
    """

    debug: bool = False
    """
    Set to true to print every write as hex.
    """

    def __init__(self, capacity: int = 0, config: Optional[WriterConfig] = None) -> None:
        """
        Creates an empty writer.

        Args:
            capacity: Expected size in bytes. Only a hint, it has no effect on the output.
            config: Encoding conventions, defaults to the "quickbin" preset.
        """
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise TypeError(f"capacity must be an int, got {type(capacity).__name__}")
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")

        self.capacity = capacity
        self.config: WriterConfig = config if config is not None else get_writer_config()
        self._order = self.config.struct_prefix
        self._bytes = bytearray()
        self._flag_cursor = 0

    @property
    def length(self) -> int:
        """The number of bytes written."""
        return len(self._bytes)

    def __len__(self) -> int:
        return len(self._bytes)

    @property
    def flag_cursor(self) -> int:
        """
        Bit position the next write_flag will use in the last byte, 0 if it will start a new byte.
        """
        return self._flag_cursor

    @property
    def live_buffer(self) -> bytearray:
        """
        The underlying buffer, without copying. Flag bytes are always stored in their current state.
        """
        return self._bytes

    def to_bytes(self) -> bytes:
        """
        Returns a copy of everything written so far.
        """
        return bytes(self._bytes)

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __repr__(self) -> str:
        return f"ByteWriter(length={len(self._bytes)}, flag_cursor={self._flag_cursor})"

    # --- Chaining helpers ---

    def then(self, action: Callable[..., Any], *args: Any, **kwargs: Any) -> "ByteWriter":
        """
        Calls action(*args, **kwargs). Exists only to keep a chain going.
        """
        action(*args, **kwargs)
        return self

    def clear(self) -> "ByteWriter":
        """
        Empties the buffer and the flag state so the writer can be reused.
        """
        self._bytes.clear()
        self._flag_cursor = 0
        return self

    def for_each(
        self, items: Iterable[T], action: Callable[[T, "ByteWriter"], Any]
    ) -> "ByteWriter":
        """
        Calls action(item, self) for every item, in order.

        Args:
            items: Values to write
            action: Usually a lambda doing the writes for one item
        """
        for item in items:
            action(item, self)
        return self

    # --- Core append ---

    def _append(self, data: BytesLike) -> "ByteWriter":
        self._bytes += data
        self._flag_cursor = 0
        if self.debug:
            print(f"write [{', '.join(hex(b) for b in bytes(data))}] -> {len(self._bytes)} bytes")
        return self

    def _write_kind(self, kind: str, value: Union[int, float]) -> "ByteWriter":
        return self._append(pack_value(self._order, kind, value))

    # --- Primitives ---

    def write_bool(self, value: bool) -> "ByteWriter":
        return self._append(b"\x01" if value else b"\x00")

    def write_int8(self, value: int) -> "ByteWriter":
        return self._write_kind("int8", value)

    def write_uint8(self, value: int) -> "ByteWriter":
        return self._write_kind("uint8", value)

    def write_int16(self, value: int) -> "ByteWriter":
        return self._write_kind("int16", value)

    def write_uint16(self, value: int) -> "ByteWriter":
        return self._write_kind("uint16", value)

    def write_int32(self, value: int) -> "ByteWriter":
        return self._write_kind("int32", value)

    def write_uint32(self, value: int) -> "ByteWriter":
        return self._write_kind("uint32", value)

    def write_int64(self, value: int) -> "ByteWriter":
        return self._write_kind("int64", value)

    def write_uint64(self, value: int) -> "ByteWriter":
        return self._write_kind("uint64", value)

    def write_float32(self, value: float) -> "ByteWriter":
        return self._write_kind("float32", value)

    def write_float64(self, value: float) -> "ByteWriter":
        return self._write_kind("float64", value)

    def write_char(self, value: Union[str, int]) -> "ByteWriter":
        """
        Writes a single UTF-16 code unit as an unsigned 16-bit value.

        Args:
            value: A one-character string inside the BMP, or the code unit as an int
        """
        if isinstance(value, str):
            if len(value) != 1:
                raise ValueError(f"Expected a single character, got {len(value)}")
            code = ord(value)
            if code > 0xFFFF:
                raise ValueError(
                    f"Character U+{code:X} needs two UTF-16 code units, write it as a string"
                )
        else:
            code = value
        return self._write_kind("uint16", code)

    def write_bytes(self, value: BytesLike) -> "ByteWriter":
        """
        Appends raw bytes verbatim.
        """
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes-like value, got {type(value).__name__}")
        return self._append(value)

    def write_string(self, value: str, encoding: Optional[str] = None) -> "ByteWriter":
        """
        Appends the encoded text with no length prefix.

        Args:
            value: The text to write
            encoding: Codec name, defaults to the config's encoding (UTF-8)
        """
        return self._append(self._encode(value, encoding))

    def write_datetime(self, value: Union[datetime, int]) -> "ByteWriter":
        """
        Writes a timestamp as int64 100ns ticks since 0001-01-01, or raw ticks if given an int.
        """
        ticks = datetime_to_ticks(value) if isinstance(value, datetime) else value
        return self._write_kind("int64", ticks)

    def write_timedelta(self, value: Union[timedelta, int]) -> "ByteWriter":
        """
        Writes a duration as int64 100ns ticks, or raw ticks if given an int.
        """
        ticks = timedelta_to_ticks(value) if isinstance(value, timedelta) else value
        return self._write_kind("int64", ticks)

    def write_version(self, value: Version) -> "ByteWriter":
        """
        Writes major, minor, build and revision as four int32 values.
        """
        for part in (value.major, value.minor, value.build, value.revision):
            check_int_range("int32", part)
        return (
            self.write_int32(value.major)
            .write_int32(value.minor)
            .write_int32(value.build)
            .write_int32(value.revision)
        )

    def write(self, value: Any) -> "ByteWriter":
        """
        Writes value using the encoding picked from its Python type.
        Plain ints are written as int32 and floats as float64.
        """
        # bool before int, datetime is not a timedelta so order there is free
        if isinstance(value, bool):
            return self.write_bool(value)
        if isinstance(value, int):
            return self.write_int32(value)
        if isinstance(value, float):
            return self.write_float64(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self.write_bytes(value)
        if isinstance(value, str):
            return self.write_string(value)
        if isinstance(value, datetime):
            return self.write_datetime(value)
        if isinstance(value, timedelta):
            return self.write_timedelta(value)
        if isinstance(value, Version):
            return self.write_version(value)
        raise TypeError(f"No binary encoding for type {type(value).__name__}")

    # --- Size-prefixed ---

    def write_sized(
        self,
        value: Union[BytesLike, str],
        prefix: str = "int",
        encoding: Optional[str] = None,
    ) -> "ByteWriter":
        """
        Writes the element count as the prefix type, then the content.

        Args:
            value: Bytes, or text encoded with encoding
            prefix: One of "sbyte", "byte", "short", "ushort", "int", "uint"
            encoding: Codec for text, defaults to the config's encoding

        Raises:
            SizeOverflowError: If the count does not fit and the policy is STRICT.
                Nothing is written in that case.
        """
        return self._write_sized(value, prefix, encoding)

    def _write_sized(
        self,
        value: Union[BytesLike, str],
        prefix: str,
        encoding: Optional[str] = None,
    ) -> "ByteWriter":
        # Only call from a public write method; the warning stacklevel assumes that depth
        if prefix not in SIZE_PREFIX_KINDS:
            raise ValueError(
                f"Unknown size prefix '{prefix}', expected one of {list(SIZE_PREFIX_KINDS)}"
            )
        kind = SIZE_PREFIX_KINDS[prefix]

        if isinstance(value, str):
            content = self._encode(value, encoding)
            count = string_count(value, content, self.config.string_size_unit)
        elif isinstance(value, (bytes, bytearray, memoryview)):
            content = bytes(value)
            count = len(content)
        else:
            raise TypeError(f"Expected bytes-like or str value, got {type(value).__name__}")

        stored = narrow_count(count, kind, self.config.size_prefix_policy, stacklevel=4)
        return self._write_kind(kind, stored)._append(content)

    def write_sbyte_sized(self, value: Union[BytesLike, str]) -> "ByteWriter":
        return self._write_sized(value, "sbyte")

    def write_byte_sized(self, value: Union[BytesLike, str]) -> "ByteWriter":
        return self._write_sized(value, "byte")

    def write_short_sized(self, value: Union[BytesLike, str]) -> "ByteWriter":
        return self._write_sized(value, "short")

    def write_ushort_sized(self, value: Union[BytesLike, str]) -> "ByteWriter":
        return self._write_sized(value, "ushort")

    def write_int_sized(self, value: Union[BytesLike, str]) -> "ByteWriter":
        return self._write_sized(value, "int")

    def write_uint_sized(self, value: Union[BytesLike, str]) -> "ByteWriter":
        return self._write_sized(value, "uint")

    # --- Bit-packed flags ---

    def write_flag(self, value: bool, force_new_byte: bool = False) -> "ByteWriter":
        """
        Writes booleans into the same byte if possible, least significant bit first.
        Up to 8 consecutive flags share a byte; any other write closes the byte.

        Args:
            value: The boolean to write
            force_new_byte: Start a new byte even if the current one has free bits
        """
        if force_new_byte:
            self._flag_cursor = 0

        if self._flag_cursor == 0:
            self.write_bool(value)
        elif value:
            self._bytes[-1] |= 1 << self._flag_cursor
            if self.debug:
                print(f"flag bit {self._flag_cursor} -> [{hex(self._bytes[-1])}]")

        self._flag_cursor = (self._flag_cursor + 1) % 8
        return self

    def _encode(self, value: str, encoding: Optional[str]) -> bytes:
        if not isinstance(value, str):
            raise TypeError(f"Expected str value, got {type(value).__name__}")
        return value.encode(encoding or self.config.encoding)
