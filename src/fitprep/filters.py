"""
Byte-level field filtering and value overriding for the FIT data section.

Rewrites Record messages in a single pass over the message stream:
speed fields can be dropped from definitions and their data messages, and
distance/speed values can be replaced with overrides encoded at the field's
width and endianness. Everything else is copied byte for byte.
"""

import logging
import math
from typing import Optional, Sequence

from fitprep.constants import (
    DISTANCE_FIELD_NUM,
    DISTANCE_SCALE,
    RECORD_MESG_NUM,
    SPEED_FIELD_NUMS,
    SPEED_SCALE,
)
from fitprep.messages import iter_messages
from fitprep.models import MessageDefinition, ProcessingOptions, RawMessage, RecordOverride

__all__ = [
    "encode_scaled_value",
    "filtered_fields",
    "is_distance_field",
    "is_speed_field",
    "rewrite_data_section",
]

logger = logging.getLogger(__name__)

_NO_OVERRIDE = RecordOverride()


def _is_record(definition: MessageDefinition) -> bool:
    return definition.global_message_number == RECORD_MESG_NUM


def is_speed_field(definition: MessageDefinition, field_number: int) -> bool:
    return _is_record(definition) and field_number in SPEED_FIELD_NUMS


def is_distance_field(definition: MessageDefinition, field_number: int) -> bool:
    return _is_record(definition) and field_number == DISTANCE_FIELD_NUM


def filtered_fields(definition: MessageDefinition, options: ProcessingOptions):
    """Return the fields of ``definition`` that survive filtering."""
    if not options.remove_speed_fields or not _is_record(definition):
        return definition.fields
    return tuple(f for f in definition.fields if f.number not in SPEED_FIELD_NUMS)


def encode_scaled_value(value: float, scale: float, size: int, big_endian: bool) -> bytes:
    """Encode ``value`` as a fixed-point unsigned integer of ``size`` bytes.

    The scaled value is rounded and clamped to the unsigned range of the
    field. Sizes other than 2 or 4 bytes are zero-filled.

    Example:
        >>> encode_scaled_value(5.0, 100, 4, big_endian=False)
        b'\\xf4\\x01\\x00\\x00'
    """
    if size not in (2, 4):
        return bytes(size)
    limit = (1 << (8 * size)) - 1
    # Round half up
    scaled = min(max(math.floor(value * scale + 0.5), 0), limit)
    return scaled.to_bytes(size, "big" if big_endian else "little")


def _rebuild_definition(message: RawMessage, fields) -> bytes:
    definition = message.definition
    out = bytearray(
        (
            message.header,
            definition.reserved,
            definition.architecture,
        )
    )
    out += definition.global_message_number.to_bytes(2, definition.byteorder)
    out.append(len(fields))
    for f in fields:
        out += bytes((f.number, f.size, f.base_type))
    if message.has_developer_data:
        out.append(len(definition.developer_fields))
        for dev in definition.developer_fields:
            out += bytes((dev.number, dev.size, dev.developer_index))
    return bytes(out)


def _rewrite_data_message(
    data_section: bytes,
    message: RawMessage,
    options: ProcessingOptions,
    override: RecordOverride,
) -> bytes:
    definition = message.definition
    out = bytearray((message.header,))
    offset = message.start + 1

    for f in definition.fields:
        field_bytes = data_section[offset : offset + f.size]
        offset += f.size

        if options.remove_speed_fields and is_speed_field(definition, f.number):
            continue
        if override.distance is not None and is_distance_field(definition, f.number):
            out += encode_scaled_value(
                override.distance, DISTANCE_SCALE, f.size, definition.is_big_endian
            )
        elif override.speed is not None and is_speed_field(definition, f.number):
            out += encode_scaled_value(
                override.speed, SPEED_SCALE, f.size, definition.is_big_endian
            )
        else:
            out += field_bytes

    # Developer fields are carried over untouched
    out += data_section[offset : message.end]
    return bytes(out)


def rewrite_data_section(
    data_section: bytes,
    options: ProcessingOptions,
    overrides: Optional[Sequence[RecordOverride]] = None,
) -> bytes:
    """Apply field filtering and value overrides to a FIT data section.

    Args:
        data_section: Original data section bytes.
        options: Processing toggles; ``remove_speed_fields`` drops Record
            fields 6 and 73 from definitions and data messages.
        overrides: Per data record index replacement values. Records beyond
            the end of the sequence are left unchanged.

    Returns:
        The rewritten data section. Messages that need no change are copied
        verbatim.

    Raises:
        FitParseError, InvalidHeaderError: Propagated from the stream walk.
    """
    overrides = overrides or ()
    out = bytearray()
    rebuilt_definitions = 0

    for message in iter_messages(data_section):
        definition = message.definition

        if message.is_definition:
            kept = filtered_fields(definition, options)
            if len(kept) == len(definition.fields):
                out += data_section[message.start : message.end]
            else:
                out += _rebuild_definition(message, kept)
                rebuilt_definitions += 1
            continue

        override = (
            overrides[message.record_index]
            if message.record_index < len(overrides)
            else _NO_OVERRIDE
        )
        if override == _NO_OVERRIDE and not options.remove_speed_fields:
            out += data_section[message.start : message.end]
        else:
            out += _rewrite_data_message(data_section, message, options, override)

    logger.debug(
        "Rewrote data section: %d -> %d bytes, %d definitions rebuilt",
        len(data_section),
        len(out),
        rebuilt_definitions,
    )
    return bytes(out)
