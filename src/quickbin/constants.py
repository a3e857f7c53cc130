from enum import IntEnum
from typing import Dict, Final, Tuple


class SizePrefixPolicy(IntEnum):
    """
    What to do when a length prefix cannot represent the element count.
    """

    TRUNCATE = 0  # Silent two's-complement wraparound, byte-compatible with QuickBin
    WARN = 1  # Wraparound plus a RuntimeWarning
    STRICT = 2  # Raise SizeOverflowError


class StringSizeUnit(IntEnum):
    """
    Which count is written in front of a size-prefixed string.
    """

    UTF16_UNITS = 0  # .NET string.Length
    CODE_POINTS = 1  # Python len()
    ENCODED_BYTES = 2  # Number of content bytes that follow


# struct format characters for every fixed-width kind.
# The byte order prefix ("<" or ">") is added by the writer.
PRIMITIVE_FORMATS: Final[Dict[str, str]] = {
    "int8": "b",
    "uint8": "B",
    "int16": "h",
    "uint16": "H",
    "int32": "i",
    "uint32": "I",
    "int64": "q",
    "uint64": "Q",
    "float32": "f",
    "float64": "d",
}

# Inclusive value ranges for the integer kinds.
INTEGER_RANGES: Final[Dict[str, Tuple[int, int]]] = {
    "int8": (-128, 127),
    "uint8": (0, 255),
    "int16": (-32768, 32767),
    "uint16": (0, 65535),
    "int32": (-2147483648, 2147483647),
    "uint32": (0, 4294967295),
    "int64": (-9223372036854775808, 9223372036854775807),
    "uint64": (0, 18446744073709551615),
}

# Prefix kinds accepted by size-prefixed writes.
# The original names them after the C# type used for the count.
SIZE_PREFIX_KINDS: Final[Dict[str, str]] = {
    "sbyte": "int8",
    "byte": "uint8",
    "short": "int16",
    "ushort": "uint16",
    "int": "int32",
    "uint": "uint32",
}

BYTE_ORDER_PREFIXES: Final[Dict[str, str]] = {
    "little": "<",
    "big": ">",
}

# Largest finite IEEE-754 single precision value.
FLOAT32_MAX: Final[float] = 3.4028234663852886e38

# Timestamps and durations are 100ns ticks; timestamps count from 0001-01-01.
TICKS_PER_MICROSECOND: Final[int] = 10
TICKS_PER_SECOND: Final[int] = 10_000_000
TICKS_PER_DAY: Final[int] = 864_000_000_000

# A CAN 2.0 frame carries at most 8 data bytes.
CAN_MAX_DATA_LENGTH: Final[int] = 8
CAN_STANDARD_ID_MAX: Final[int] = 0x7FF
CAN_EXTENDED_ID_MAX: Final[int] = 0x1FFFFFFF
