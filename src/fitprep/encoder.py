"""
Re-encoding of FIT files with a new data section.

Rebuilds the header with the new data length, recomputes the optional
header CRC and the trailing file CRC, and concatenates the final bytes.
"""

from fitprep.constants import DATA_SIZE_END, DATA_SIZE_OFFSET, MAX_DATA_SIZE
from fitprep.crc import crc_bytes
from fitprep.exceptions import InvalidHeaderError

__all__ = ["reencode"]


def reencode(header_without_crc: bytes, has_header_crc: bool, data_section: bytes) -> bytes:
    """Rebuild a FIT file from an original header and a new data section.

    Args:
        header_without_crc: Original header bytes, excluding the header CRC.
        has_header_crc: Whether a header CRC follows the header bytes.
        data_section: New data section.

    Returns:
        Complete FIT file bytes: header, optional header CRC, data section and
        trailing CRC over everything before it.

    Raises:
        InvalidHeaderError: If the header is empty or the data section does
            not fit in the 32-bit length field.
    """
    if not header_without_crc:
        raise InvalidHeaderError("missing header byte")

    header = bytearray(header_without_crc)
    if len(header) >= DATA_SIZE_END:
        if len(data_section) > MAX_DATA_SIZE:
            raise InvalidHeaderError("data section too large")
        header[DATA_SIZE_OFFSET:DATA_SIZE_END] = len(data_section).to_bytes(4, "little")

    rebuilt = bytearray(header)
    if has_header_crc:
        rebuilt += crc_bytes(header)

    rebuilt += data_section
    rebuilt += crc_bytes(rebuilt)
    return bytes(rebuilt)
