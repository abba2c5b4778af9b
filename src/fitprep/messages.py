"""
Message stream decoder for the FIT data section.

Walks the data section as a sequence of definition and data messages,
keeping a definition table keyed by local message number. Data messages
are located by byte range only; names and values are resolved separately
by the semantic catalog (see fitprep.catalog).
"""

import logging
from typing import Dict, Iterator, List

from fitprep.constants import (
    BIG_ENDIAN,
    COMPRESSED_TIMESTAMP_MASK,
    DEFINITION_MASK,
    DEVELOPER_DATA_MASK,
    LOCAL_MESSAGE_MASK,
)
from fitprep.exceptions import FitParseError, InvalidHeaderError
from fitprep.models import (
    DeveloperFieldDefinition,
    FieldDefinition,
    MessageDefinition,
    RawMessage,
)

__all__ = ["iter_messages", "read_definitions", "count_data_messages"]

logger = logging.getLogger(__name__)

# reserved + architecture + global message number (2) + field count
_DEFINITION_FIXED_SIZE = 5
_TRIPLET_SIZE = 3


def _parse_definition(data: bytes, offset: int, header: int):
    """Parse a definition message body starting right after its header byte.

    Returns:
        Tuple of (MessageDefinition, offset past the message).
    """
    if offset + _DEFINITION_FIXED_SIZE > len(data):
        raise InvalidHeaderError("definition message truncated")

    reserved = data[offset]
    architecture = data[offset + 1]
    byteorder = "big" if architecture == BIG_ENDIAN else "little"
    global_mesg_num = int.from_bytes(data[offset + 2 : offset + 4], byteorder)
    num_fields = data[offset + 4]
    offset += _DEFINITION_FIXED_SIZE

    fields = []
    for _ in range(num_fields):
        if offset + _TRIPLET_SIZE > len(data):
            raise InvalidHeaderError("field definition truncated")
        fields.append(FieldDefinition(data[offset], data[offset + 1], data[offset + 2]))
        offset += _TRIPLET_SIZE

    developer_fields = []
    if header & DEVELOPER_DATA_MASK:
        if offset >= len(data):
            raise InvalidHeaderError("missing developer count")
        dev_count = data[offset]
        offset += 1
        for _ in range(dev_count):
            if offset + _TRIPLET_SIZE > len(data):
                raise InvalidHeaderError("developer field truncated")
            developer_fields.append(
                DeveloperFieldDefinition(data[offset], data[offset + 1], data[offset + 2])
            )
            offset += _TRIPLET_SIZE

    definition = MessageDefinition(
        local_message_number=header & LOCAL_MESSAGE_MASK,
        global_message_number=global_mesg_num,
        architecture=architecture,
        fields=tuple(fields),
        developer_fields=tuple(developer_fields),
        reserved=reserved,
    )
    return definition, offset


def iter_messages(data_section: bytes) -> Iterator[RawMessage]:
    """Walk the data section message by message.

    The definition table is local to the walk: a later definition for the
    same local message number replaces the earlier one for every data
    message that follows it.

    Args:
        data_section: Bytes between the file header and the trailing CRC.

    Yields:
        RawMessage for each definition and data message, in stream order.
        Data messages carry a running record index starting at 0.

    Raises:
        FitParseError: On a compressed timestamp header.
        InvalidHeaderError: On truncated messages or a data message whose
            local message number has no preceding definition.
    """
    definitions: Dict[int, MessageDefinition] = {}
    offset = 0
    record_index = 0
    end = len(data_section)

    while offset < end:
        start = offset
        header = data_section[offset]
        offset += 1

        if header & COMPRESSED_TIMESTAMP_MASK:
            raise FitParseError("unsupported compressed timestamp header")

        if header & DEFINITION_MASK:
            definition, offset = _parse_definition(data_section, offset, header)
            definitions[definition.local_message_number] = definition
            yield RawMessage(header=header, start=start, end=offset, definition=definition)
            continue

        definition = definitions.get(header & LOCAL_MESSAGE_MASK)
        if definition is None:
            raise InvalidHeaderError("data message missing preceding definition")

        offset += definition.data_size
        if offset > end:
            raise InvalidHeaderError("data message truncated")

        yield RawMessage(
            header=header,
            start=start,
            end=offset,
            definition=definition,
            record_index=record_index,
        )
        record_index += 1

    logger.debug(
        "Walked %d bytes: %d data messages, %d local definitions",
        end,
        record_index,
        len(definitions),
    )


def read_definitions(data_section: bytes) -> List[MessageDefinition]:
    """Return every definition message in the data section, in order."""
    return [m.definition for m in iter_messages(data_section) if m.is_definition]


def count_data_messages(data_section: bytes) -> int:
    """Count data messages, validating the whole stream on the way."""
    return sum(1 for m in iter_messages(data_section) if not m.is_definition)
