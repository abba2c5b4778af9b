"""
Constants shared across the FIT preprocessing pipeline.

Values follow the FIT protocol: framing offsets, message header bits,
Record message field numbers and the fixed-point scales used when
writing overridden values back into the binary stream.
"""

# Framing
MIN_HEADER_SIZE = 12
HEADER_CRC_SIZE = 2
FILE_CRC_SIZE = 2
DATA_SIZE_OFFSET = 4
DATA_SIZE_END = DATA_SIZE_OFFSET + 4
MAX_DATA_SIZE = 0xFFFFFFFF

# Message header bits
COMPRESSED_TIMESTAMP_MASK = 0x80
DEFINITION_MASK = 0x40
DEVELOPER_DATA_MASK = 0x20
LOCAL_MESSAGE_MASK = 0x0F

# Architecture byte
LITTLE_ENDIAN = 0
BIG_ENDIAN = 1

# Record message (global message number 20)
RECORD_MESG_NUM = 20
DISTANCE_FIELD_NUM = 5
SPEED_FIELD_NUM = 6
ENHANCED_SPEED_FIELD_NUM = 73
SPEED_FIELD_NUMS = frozenset({SPEED_FIELD_NUM, ENHANCED_SPEED_FIELD_NUM})
SPEED_FIELD_NAMES = frozenset({"speed", "enhanced_speed"})

# Fixed-point scales used by the Record profile (m -> cm, m/s -> mm/s)
DISTANCE_SCALE = 100.0
SPEED_SCALE = 1000.0

# Garmin nibble table for the FIT CRC-16
CRC_TABLE = (
    0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
    0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
)

# Analytics
SPEED_SMOOTHING_WINDOW = 5

# CLI defaults
DEFAULT_OUTPUT_DIR = "data"
DEFAULT_TIMEZONE = "Europe/Helsinki"
MISSING_VALUE = "—"
