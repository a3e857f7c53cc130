import codecs
from dataclasses import dataclass
from typing import Dict, Any, Optional

from .constants import BYTE_ORDER_PREFIXES, SizePrefixPolicy, StringSizeUnit


@dataclass
class WriterConfig:
    """
    Encoding conventions for a ByteWriter.
    All fields are mandatory so that two writers built from the same config
    always agree on the byte layout.
    """

    # Byte order for every multi-byte value: "little" or "big".
    # QuickBin payloads are little-endian.
    byte_order: str

    # Default text codec for string writes, any name accepted by codecs.lookup().
    encoding: str

    # Behavior when a length prefix is too narrow for the count.
    size_prefix_policy: SizePrefixPolicy

    # Count written in front of size-prefixed strings.
    string_size_unit: StringSizeUnit

    def __post_init__(self) -> None:
        if self.byte_order not in BYTE_ORDER_PREFIXES:
            raise ValueError(
                f"Unknown byte order '{self.byte_order}', expected one of {list(BYTE_ORDER_PREFIXES)}"
            )
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"Unknown text encoding '{self.encoding}'") from e

        # Presets and JSON-ish overrides may name enum members as strings.
        if isinstance(self.size_prefix_policy, str):
            self.size_prefix_policy = _enum_by_name(
                SizePrefixPolicy, self.size_prefix_policy
            )
        else:
            self.size_prefix_policy = SizePrefixPolicy(self.size_prefix_policy)
        if isinstance(self.string_size_unit, str):
            self.string_size_unit = _enum_by_name(
                StringSizeUnit, self.string_size_unit
            )
        else:
            self.string_size_unit = StringSizeUnit(self.string_size_unit)

    @property
    def struct_prefix(self) -> str:
        """
        The struct module byte order character for this config.
        """
        return BYTE_ORDER_PREFIXES[self.byte_order]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WriterConfig":
        """
        Create a config object from a dictionary.
        Raises ValueError if required fields are missing.
        """
        known_fields = cls.__annotations__.keys()

        missing = [key for key in known_fields if key not in data]
        if missing:
            raise ValueError(
                f"Invalid Writer Configuration. Missing required fields: {missing}"
            )

        filtered_data = {k: v for k, v in data.items() if k in known_fields}
        return cls(**filtered_data)


def _enum_by_name(enum_cls: Any, name: str) -> Any:
    try:
        return enum_cls[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown {enum_cls.__name__} '{name}', expected one of {[m.name for m in enum_cls]}"
        ) from None


# Named presets
DEFAULTS: Dict[str, Dict[str, Any]] = {
    "quickbin": {
        "byte_order": "little",
        "encoding": "utf-8",
        "size_prefix_policy": SizePrefixPolicy.TRUNCATE,  # unchecked cast, as QuickBin does
        "string_size_unit": StringSizeUnit.UTF16_UNITS,  # string.Length
    },
    "strict": {
        "byte_order": "little",
        "encoding": "utf-8",
        "size_prefix_policy": SizePrefixPolicy.STRICT,
        "string_size_unit": StringSizeUnit.ENCODED_BYTES,
    },
    "network": {
        "byte_order": "big",
        "encoding": "utf-8",
        "size_prefix_policy": SizePrefixPolicy.STRICT,
        "string_size_unit": StringSizeUnit.ENCODED_BYTES,
    },
}

DEFAULT_PRESET = "quickbin"


def get_writer_config(
    name: str = DEFAULT_PRESET, custom_config: Optional[Dict[str, Any]] = None
) -> WriterConfig:
    """
    Retrieve a writer configuration.

    Args:
        name: The preset name (e.g., 'quickbin', 'strict', 'network').
        custom_config: A dictionary of overrides. If provided, these values
                       will replace the preset's.

    Returns:
        A WriterConfig object.

    Raises:
        ValueError: If the preset is unknown and no custom config is provided,
                    or if the resulting configuration is missing or has invalid fields.
    """
    if name in DEFAULTS:
        base_data = DEFAULTS[name].copy()
    elif custom_config:
        # A new preset name must supply every field itself
        base_data = {}
    else:
        raise ValueError(f"Unknown writer preset '{name}' and no custom config provided.")

    if custom_config:
        base_data.update(custom_config)

    return WriterConfig.from_dict(base_data)
