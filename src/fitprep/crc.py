"""
FIT CRC-16.

Garmin's nibble-table variant of the CRC-16 used for both the header
checksum and the trailing file checksum.
"""

from fitprep.constants import CRC_TABLE

__all__ = ["calculate_crc", "crc_bytes"]


def calculate_crc(data: bytes, crc: int = 0) -> int:
    """Calculate the FIT CRC-16 of ``data``.

    Each byte is folded in low nibble first, then high nibble. Passing a
    previous ``crc`` continues a running checksum.

    Args:
        data: Bytes to checksum.
        crc: Starting CRC value, 0 for a fresh checksum.

    Returns:
        The 16-bit CRC as an int.

    Example:
        >>> hex(calculate_crc(b"123456789"))
        '0xbb3d'
    """
    for byte in data:
        tmp = CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ CRC_TABLE[byte & 0xF]

        tmp = CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ CRC_TABLE[(byte >> 4) & 0xF]
    return crc


def crc_bytes(data: bytes) -> bytes:
    """Return the CRC of ``data`` as the two little-endian bytes stored in a FIT file."""
    return calculate_crc(data).to_bytes(2, "little")
