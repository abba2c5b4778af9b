"""
FIT file framing.

Validates the file header and splits raw bytes into the header region,
the data section and the trailing checksum. Framing is checked here
independently of the semantic decoder so truncated or inconsistent files
fail with a precise InvalidHeaderError.
"""

from typing import Tuple

from fitprep.constants import (
    DATA_SIZE_END,
    DATA_SIZE_OFFSET,
    FILE_CRC_SIZE,
    HEADER_CRC_SIZE,
    MIN_HEADER_SIZE,
)
from fitprep.exceptions import InvalidHeaderError
from fitprep.models import FitHeader

__all__ = ["parse_header", "split_file"]


def parse_header(data: bytes) -> FitHeader:
    """Parse and validate the FIT file header.

    Args:
        data: Complete FIT file contents.

    Returns:
        FitHeader with the declared sizes and the header bytes that precede
        the optional header CRC.

    Raises:
        InvalidHeaderError: If the header is missing, too small, or
            inconsistent with the file length.
    """
    if not data:
        raise InvalidHeaderError("missing header byte")

    header_size = data[0]
    if header_size < MIN_HEADER_SIZE:
        raise InvalidHeaderError("header too small to be a FIT file")

    if len(data) < header_size + FILE_CRC_SIZE:
        raise InvalidHeaderError("file shorter than minimum header + CRC")

    has_header_crc = header_size > MIN_HEADER_SIZE
    header_end = header_size - HEADER_CRC_SIZE if has_header_crc else header_size
    header_without_crc = bytes(data[:header_end])

    if DATA_SIZE_END > len(header_without_crc):
        raise InvalidHeaderError("header missing data size field")

    return FitHeader(
        header_size=header_size,
        data_size=int.from_bytes(header_without_crc[DATA_SIZE_OFFSET:DATA_SIZE_END], "little"),
        has_header_crc=has_header_crc,
        header_without_crc=header_without_crc,
        protocol_version=header_without_crc[1],
        profile_version=int.from_bytes(header_without_crc[2:4], "little"),
        data_type=header_without_crc[8:12],
    )


def split_file(data: bytes) -> Tuple[FitHeader, bytes]:
    """Split a FIT file into its header and data section.

    Returns:
        Tuple of (header, data_section).

    Raises:
        InvalidHeaderError: If the declared data size overruns the file.
    """
    header = parse_header(data)
    data_start = header.header_size
    data_end = data_start + header.data_size
    if data_end + FILE_CRC_SIZE > len(data):
        raise InvalidHeaderError("file shorter than declared data size")
    return header, bytes(data[data_start:data_end])
