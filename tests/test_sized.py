"""Tests for size-prefixed byte and string writes."""

import pytest
import struct
import warnings

from quickbin.config import get_writer_config
from quickbin.constants import SizePrefixPolicy, StringSizeUnit
from quickbin.serializer import ByteWriter
from quickbin.utils import SizeOverflowError


def test_byte_sized_string(writer: ByteWriter) -> None:
    assert writer.write_byte_sized("hi").to_bytes() == bytes([2]) + b"hi"


def test_int_sized_bytes(writer: ByteWriter) -> None:
    content = b"\x01\x02\x03\x04\x05"
    assert writer.write_int_sized(content).to_bytes() == bytes([5, 0, 0, 0]) + content


@pytest.mark.parametrize(
    "method, fmt",
    [
        ("write_sbyte_sized", "<b"),
        ("write_byte_sized", "<B"),
        ("write_short_sized", "<h"),
        ("write_ushort_sized", "<H"),
        ("write_int_sized", "<i"),
        ("write_uint_sized", "<I"),
    ],
)
def test_prefix_widths(writer: ByteWriter, method: str, fmt: str) -> None:
    data = getattr(writer, method)(b"abc").to_bytes()
    assert data == struct.pack(fmt, 3) + b"abc"


def test_write_sized_default_prefix_is_int(writer: ByteWriter) -> None:
    assert writer.write_sized(b"a").to_bytes() == bytes([1, 0, 0, 0]) + b"a"


def test_write_sized_with_encoding(writer: ByteWriter) -> None:
    data = writer.write_sized("hi", "byte", encoding="utf-16-le").to_bytes()
    assert data == bytes([2]) + b"h\x00i\x00"


def test_unknown_prefix_raises(writer: ByteWriter) -> None:
    with pytest.raises(ValueError, match="Unknown size prefix"):
        writer.write_sized(b"a", "long")


def test_wrong_type_raises(writer: ByteWriter) -> None:
    with pytest.raises(TypeError):
        writer.write_byte_sized(5)  # type: ignore[arg-type]
    assert len(writer) == 0


def test_string_prefix_counts_utf16_units_by_default(writer: ByteWriter) -> None:
    # "é" is one character but two UTF-8 bytes
    assert writer.write_byte_sized("é").to_bytes() == bytes([1, 0xC3, 0xA9])


def test_string_prefix_surrogate_pair_counts_two(writer: ByteWriter) -> None:
    data = writer.write_byte_sized("\U0001F600").to_bytes()
    assert data[0] == 2
    assert data[1:] == "\U0001F600".encode("utf-8")


def test_string_prefix_encoded_bytes() -> None:
    writer = ByteWriter(config=get_writer_config("strict"))
    assert writer.write_byte_sized("é").to_bytes() == bytes([2, 0xC3, 0xA9])


def test_string_prefix_code_points() -> None:
    config = get_writer_config(
        custom_config={"string_size_unit": StringSizeUnit.CODE_POINTS}
    )
    writer = ByteWriter(config=config)
    assert writer.write_byte_sized("\U0001F600").to_bytes()[0] == 1


class TestOverflowPolicy:
    def test_truncate_byte_prefix(self, writer: ByteWriter) -> None:
        content = bytes(300)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            data = writer.write_byte_sized(content).to_bytes()
        assert data[0] == 300 % 256
        assert data[1:] == content

    def test_truncate_sbyte_prefix_wraps_negative(self, writer: ByteWriter) -> None:
        data = writer.write_sbyte_sized(bytes(200)).to_bytes()
        assert struct.unpack("<b", data[:1])[0] == -56
        assert len(data) == 201

    def test_truncate_ushort_prefix(self, writer: ByteWriter) -> None:
        data = writer.write_ushort_sized(bytes(65537)).to_bytes()
        assert data[:2] == b"\x01\x00"

    def test_warn_policy(self) -> None:
        config = get_writer_config(custom_config={"size_prefix_policy": "warn"})
        writer = ByteWriter(config=config)
        with pytest.warns(RuntimeWarning, match="Count 256 truncated to 0"):
            writer.write_byte_sized(bytes(256))
        assert len(writer) == 257

    def test_strict_policy_writes_nothing(self) -> None:
        writer = ByteWriter(config=get_writer_config("strict"))
        writer.write_uint8(9)
        with pytest.raises(SizeOverflowError, match="Count 256"):
            writer.write_byte_sized(bytes(256))
        assert writer.to_bytes() == b"\x09"

    def test_strict_policy_max_fits(self) -> None:
        writer = ByteWriter(config=get_writer_config("strict"))
        data = writer.write_sbyte_sized(bytes(127)).to_bytes()
        assert data[0] == 127

    def test_strict_string_counts_encoded_bytes(self) -> None:
        # 128 characters but 256 bytes: fits a byte prefix by count, not by size
        writer = ByteWriter(config=get_writer_config("strict"))
        with pytest.raises(SizeOverflowError):
            writer.write_byte_sized("é" * 128)

    def test_policy_enum_from_config(self) -> None:
        config = get_writer_config("strict")
        assert config.size_prefix_policy is SizePrefixPolicy.STRICT


class TestWarningLocation:
    @pytest.fixture
    def warn_writer(self) -> ByteWriter:
        return ByteWriter(config=get_writer_config(custom_config={"size_prefix_policy": "warn"}))

    def test_shorthand_warning_points_at_caller(self, warn_writer: ByteWriter) -> None:
        with pytest.warns(RuntimeWarning) as record:
            warn_writer.write_byte_sized(bytes(256))
        assert record[0].filename == __file__

    def test_write_sized_warning_points_at_caller(self, warn_writer: ByteWriter) -> None:
        with pytest.warns(RuntimeWarning) as record:
            warn_writer.write_sized(bytes(256), "byte")
        assert record[0].filename == __file__
