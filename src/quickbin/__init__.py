from .serializer import ByteWriter
from .config import get_writer_config, WriterConfig
from .constants import SizePrefixPolicy, StringSizeUnit
from .utils import SizeOverflowError
from .version import Version
from .framing import FrameSender, split_frames

__all__ = [
    "ByteWriter",
    "get_writer_config",
    "WriterConfig",
    "SizePrefixPolicy",
    "StringSizeUnit",
    "SizeOverflowError",
    "Version",
    "FrameSender",
    "split_frames",
]
