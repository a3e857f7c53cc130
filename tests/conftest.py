import pytest
from typing import Generator

from quickbin.framing import FrameSender
from quickbin.serializer import ByteWriter


@pytest.fixture
def writer() -> ByteWriter:
    """A fresh writer with the default (QuickBin compatible) config."""
    return ByteWriter()


@pytest.fixture(autouse=True)
def reset_debug_flags() -> Generator[None, None, None]:
    """Class-level debug switches must not leak between tests."""
    yield
    ByteWriter.debug = False
    FrameSender.debug = False
