"""Shared fixtures: a small builder for synthetic FIT files."""

from typing import Iterable, Optional, Sequence, Tuple

import pytest

from fitprep.crc import crc_bytes

# Base types
ENUM = 0x00
UINT8 = 0x02
UINT16 = 0x84
UINT32 = 0x86

FILE_ID = 0
SESSION = 18
RECORD = 20

# FIT timestamp (seconds since 1989-12-31) used as the start of synthetic activities
START_TIMESTAMP = 1_000_000_000

RECORD_FIELDS = [(253, 4, UINT32), (5, 4, UINT32), (6, 2, UINT16), (3, 1, UINT8)]
RECORD_FIELDS_ENHANCED = RECORD_FIELDS + [(73, 4, UINT32)]


def definition_message(
    local: int,
    global_num: int,
    fields: Iterable[Tuple[int, int, int]],
    architecture: int = 0,
    developer_fields: Optional[Sequence[Tuple[int, int, int]]] = None,
) -> bytes:
    """Encode a definition message."""
    fields = list(fields)
    header = 0x40 | local
    if developer_fields is not None:
        header |= 0x20
    byteorder = "big" if architecture else "little"
    out = bytearray([header, 0, architecture])
    out += global_num.to_bytes(2, byteorder)
    out.append(len(fields))
    for triplet in fields:
        out += bytes(triplet)
    if developer_fields is not None:
        out.append(len(developer_fields))
        for triplet in developer_fields:
            out += bytes(triplet)
    return bytes(out)


def data_message(local: int, *values: bytes) -> bytes:
    """Encode a data message from already encoded field values."""
    return bytes([local]) + b"".join(values)


def u8(value: int) -> bytes:
    return value.to_bytes(1, "little")


def u16(value: int, byteorder: str = "little") -> bytes:
    return value.to_bytes(2, byteorder)


def u32(value: int, byteorder: str = "little") -> bytes:
    return value.to_bytes(4, byteorder)


def build_fit(data_section: bytes, header_size: int = 14) -> bytes:
    """Wrap a data section with a header and both CRCs."""
    header = bytearray([header_size, 0x10])
    header += u16(2132)
    header += u32(len(data_section))
    header += b".FIT"
    if header_size == 14:
        header += crc_bytes(bytes(header))
    body = bytes(header) + data_section
    return body + crc_bytes(body)


def build_activity(
    distances_m: Sequence[float],
    speeds_ms: Optional[Sequence[float]] = None,
    heart_rates: Optional[Sequence[int]] = None,
    enhanced_speed: bool = False,
    architecture: int = 0,
    header_size: int = 14,
) -> bytes:
    """Build a running activity with one record per second.

    Layout: file_id (local 0), record definition (local 1) and one record
    per distance, then a session (local 2) with sport=running.
    """
    byteorder = "big" if architecture else "little"
    n = len(distances_m)
    speeds_ms = speeds_ms if speeds_ms is not None else [0.0] * n
    heart_rates = heart_rates if heart_rates is not None else [140] * n
    fields = RECORD_FIELDS_ENHANCED if enhanced_speed else RECORD_FIELDS

    section = bytearray()
    section += definition_message(0, FILE_ID, [(0, 1, ENUM), (1, 2, UINT16), (4, 4, UINT32)])
    section += data_message(0, u8(4), u16(1), u32(START_TIMESTAMP))

    section += definition_message(1, RECORD, fields, architecture=architecture)
    for i in range(n):
        values = [
            u32(START_TIMESTAMP + i, byteorder),
            u32(round(distances_m[i] * 100), byteorder),
            u16(round(speeds_ms[i] * 1000), byteorder),
            u8(heart_rates[i]),
        ]
        if enhanced_speed:
            values.append(u32(round(speeds_ms[i] * 1000), byteorder))
        section += data_message(1, *values)

    section += definition_message(2, SESSION, [(253, 4, UINT32), (5, 1, ENUM)])
    section += data_message(2, u32(START_TIMESTAMP + n - 1), u8(1))
    return build_fit(bytes(section), header_size=header_size)


# Distances with a one-second spike between samples 3 and 4
SPIKY_DISTANCES = [0.0, 3.0, 6.0, 9.0, 20.0, 23.0, 26.0, 29.0]
SPIKY_SPEEDS = [0.0, 3.0, 3.0, 3.0, 11.0, 3.0, 3.0, 3.0]


@pytest.fixture
def activity_bytes():
    """Running activity with a speed spike, speed and enhanced_speed encoded."""
    return build_activity(
        SPIKY_DISTANCES,
        speeds_ms=SPIKY_SPEEDS,
        heart_rates=[120, 130, 140, 150, 160, 150, 140, 130],
        enhanced_speed=True,
    )


@pytest.fixture
def minimal_record_file():
    """Header size 12, one record definition (distance, speed), two data messages."""
    section = definition_message(0, RECORD, [(5, 4, UINT32), (6, 2, UINT16)])
    section += data_message(0, u32(0), u16(0))
    section += data_message(0, u32(500), u16(300))
    return build_fit(section, header_size=12)
