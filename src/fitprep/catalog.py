"""
Semantic field catalog backed by fitparse.

fitparse supplies the FIT profile: message names, field names, units,
scales and offsets keyed by global message number and field number. This
module wraps it so the rest of the pipeline sees plain DecodedRecord
objects and fitprep exceptions.

Date-time fields are converted with timezone-aware datetimes instead of
fitparse's deprecated datetime.utcfromtimestamp().
"""

import datetime
import io
import logging
from numbers import Number
from typing import Any, List, Optional

from fitparse import FitFile
from fitparse.processors import FitFileDataProcessor
from fitparse.utils import FitCRCError as _FitparseCRCError
from fitparse.utils import FitParseError as _FitparseError

from fitprep.exceptions import FitCRCError, FitParseError
from fitprep.models import DecodedField, DecodedRecord, MessageKind

__all__ = ["CatalogDataProcessor", "decode_records", "numeric_value", "UTC_REFERENCE"]

logger = logging.getLogger(__name__)

# UTC reference for FIT timestamps (seconds since UTC 00:00 Dec 31 1989)
UTC_REFERENCE = 631065600

# Values below this are relative system times, not absolute date_time values
_MIN_ABSOLUTE_DATE_TIME = 0x10000000


class CatalogDataProcessor(FitFileDataProcessor):
    """fitparse data processor producing timezone-aware timestamps."""

    def process_type_date_time(self, field_data):
        value = field_data.value
        if value is not None and value >= _MIN_ABSOLUTE_DATE_TIME:
            field_data.value = datetime.datetime.fromtimestamp(
                UTC_REFERENCE + value, tz=datetime.timezone.utc
            )
            field_data.units = None

    def process_type_local_date_time(self, field_data):
        if field_data.value is not None:
            field_data.value = datetime.datetime.fromtimestamp(
                UTC_REFERENCE + field_data.value, tz=datetime.timezone.utc
            )
            field_data.units = None


def numeric_value(value: Any) -> Optional[float]:
    """Convert a decoded field value to a float where it has a numeric meaning.

    Datetimes become POSIX seconds; strings, tuples and None yield None.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.timestamp()
    if isinstance(value, Number):
        return float(value)
    return None


def _to_record(message) -> DecodedRecord:
    fields = tuple(
        DecodedField(
            name=f.name,
            value=f.value,
            units=f.units or None,
            numeric_value=numeric_value(f.value),
        )
        for f in message.fields
    )
    return DecodedRecord(
        kind=MessageKind.from_number(message.mesg_num),
        name=message.name,
        global_message_number=message.mesg_num,
        fields=fields,
    )


def decode_records(data: bytes, check_crc: bool = True) -> List[DecodedRecord]:
    """Decode every data message of a FIT file through the FIT profile.

    Args:
        data: Complete FIT file contents.
        check_crc: Validate the header and file checksums.

    Returns:
        One DecodedRecord per data message, in stream order.

    Raises:
        FitCRCError: If a checksum does not match.
        FitParseError: For any other decoding failure.
    """
    try:
        fit_file = FitFile(
            io.BytesIO(data), check_crc=check_crc, data_processor=CatalogDataProcessor()
        )
        records = [_to_record(m) for m in fit_file.get_messages()]
    except _FitparseCRCError as exc:
        raise FitCRCError(f"CRC validation failed: {exc}") from exc
    except _FitparseError as exc:
        raise FitParseError(str(exc)) from exc

    logger.debug("Decoded %d data messages", len(records))
    return records
