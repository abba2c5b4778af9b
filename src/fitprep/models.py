"""
Data model for the FIT preprocessing pipeline.

Frozen dataclasses for framing, message definitions, decoded records,
processing options and the derived workout summary.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from fitprep.constants import BIG_ENDIAN, DEVELOPER_DATA_MASK, SPEED_SMOOTHING_WINDOW
from fitprep.exceptions import ConfigurationError

__all__ = [
    "MessageKind",
    "FitHeader",
    "FieldDefinition",
    "DeveloperFieldDefinition",
    "MessageDefinition",
    "RawMessage",
    "DecodedField",
    "DecodedRecord",
    "RecordOverride",
    "ProcessingOptions",
    "WorkoutSummary",
    "ParsedFile",
    "ProcessedOutput",
]


class MessageKind(IntEnum):
    """Well-known FIT global message numbers."""

    FILE_ID = 0
    CAPABILITIES = 1
    DEVICE_SETTINGS = 2
    USER_PROFILE = 3
    ZONES_TARGET = 7
    SPORT = 12
    SESSION = 18
    LAP = 19
    RECORD = 20
    EVENT = 21
    DEVICE_INFO = 23
    WORKOUT = 26
    WORKOUT_STEP = 27
    ACTIVITY = 34
    FILE_CREATOR = 49
    HRV = 78
    DEVELOPER_DATA_ID = 207
    FIELD_DESCRIPTION = 206
    SPLIT = 312
    UNKNOWN = 0xFFFF

    @classmethod
    def from_number(cls, global_message_number: int) -> "MessageKind":
        """Map a global message number to its kind, UNKNOWN when not listed."""
        try:
            return cls(global_message_number)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class FitHeader:
    """Parsed FIT file header."""

    header_size: int
    data_size: int
    has_header_crc: bool
    header_without_crc: bytes
    protocol_version: Optional[int] = None
    profile_version: Optional[int] = None
    data_type: bytes = b""


@dataclass(frozen=True)
class FieldDefinition:
    """Layout of one field inside a definition message."""

    number: int
    size: int
    base_type: int


@dataclass(frozen=True)
class DeveloperFieldDefinition:
    """Layout of one developer field inside a definition message."""

    number: int
    size: int
    developer_index: int


@dataclass(frozen=True)
class MessageDefinition:
    """Field layout declared for a local message number."""

    local_message_number: int
    global_message_number: int
    architecture: int
    fields: Tuple[FieldDefinition, ...] = ()
    developer_fields: Tuple[DeveloperFieldDefinition, ...] = ()
    reserved: int = 0

    @property
    def is_big_endian(self) -> bool:
        return self.architecture == BIG_ENDIAN

    @property
    def byteorder(self) -> str:
        return "big" if self.is_big_endian else "little"

    @property
    def data_size(self) -> int:
        """Number of bytes a data message using this definition occupies after its header."""
        return sum(f.size for f in self.fields) + sum(f.size for f in self.developer_fields)


@dataclass(frozen=True)
class RawMessage:
    """One message of the data section as located by the stream decoder.

    ``record_index`` is None for definition messages and the running data
    record index for data messages.
    """

    header: int
    start: int
    end: int
    definition: MessageDefinition
    record_index: Optional[int] = None

    @property
    def is_definition(self) -> bool:
        return self.record_index is None

    @property
    def has_developer_data(self) -> bool:
        return bool(self.header & DEVELOPER_DATA_MASK)


@dataclass(frozen=True)
class DecodedField:
    """A named field value resolved through the semantic catalog."""

    name: str
    value: Any
    units: Optional[str] = None
    numeric_value: Optional[float] = None

    @property
    def display_value(self) -> str:
        if self.value is None:
            return ""
        if self.units:
            return f"{self.value} {self.units}"
        return str(self.value)


@dataclass(frozen=True)
class DecodedRecord:
    """One decoded data message."""

    kind: MessageKind
    name: str
    global_message_number: int
    fields: Tuple[DecodedField, ...] = ()

    def get(self, name: str) -> Optional[DecodedField]:
        """Return the first field called ``name``, or None."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class RecordOverride:
    """Replacement values for one data record, in SI units."""

    speed: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class ProcessingOptions:
    """User-facing toggles that adjust how FIT bytes are rewritten."""

    remove_speed_fields: bool = False
    smooth_speed: bool = False
    smoothing_window: int = SPEED_SMOOTHING_WINDOW

    def __post_init__(self):
        if self.smoothing_window < 0:
            raise ConfigurationError(
                f"smoothing_window must be non-negative, got {self.smoothing_window}"
            )


@dataclass(frozen=True)
class WorkoutSummary:
    """Derived overview metrics from the FIT records."""

    duration_seconds: Optional[float] = None
    workout_type: Optional[str] = None
    distance_meters: Optional[float] = None
    speed_min: Optional[float] = None
    speed_mean: Optional[float] = None
    speed_max: Optional[float] = None
    heart_rate_min: Optional[float] = None
    heart_rate_mean: Optional[float] = None
    heart_rate_max: Optional[float] = None
    start_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ParsedFile:
    """Decomposed pieces of a FIT file used for later reconstruction."""

    header: FitHeader
    data_section: bytes
    records: List[DecodedRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ProcessedOutput:
    """Result of one processing pass."""

    records: List[DecodedRecord]
    processed_bytes: bytes
    summary: WorkoutSummary
