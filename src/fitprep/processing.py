"""
FIT file preprocessing pipeline and command line front end.

This module ties the pieces together: framing validation, the message
stream walk, semantic decoding, workout analytics, byte-level filtering and
re-encoding with fresh checksums.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
from dateutil import tz

from fitprep.analytics import derive_workout_data
from fitprep.catalog import decode_records
from fitprep.constants import DEFAULT_OUTPUT_DIR, DEFAULT_TIMEZONE, SPEED_SMOOTHING_WINDOW
from fitprep.encoder import reencode
from fitprep.exceptions import (
    ConfigurationError,
    FitFileNotFoundError,
    FitParseError,
    FitPrepError,
)
from fitprep.filters import rewrite_data_section
from fitprep.formatting import format_pace, summary_rows
from fitprep.framing import split_file
from fitprep.messages import count_data_messages, read_definitions
from fitprep.models import (
    DecodedRecord,
    MessageKind,
    ParsedFile,
    ProcessedOutput,
    ProcessingOptions,
    WorkoutSummary,
)

__all__ = [
    "parse",
    "process",
    "process_file",
    "records_to_frame",
    "parse_arguments",
    "main_with_args",
    "main",
]

logger = logging.getLogger(__name__)


def parse(data: bytes) -> ParsedFile:
    """Parse a raw FIT file into its component parts while validating CRCs.

    Framing and the message stream are validated by fitprep itself first,
    so truncation, undefined local message numbers and compressed timestamp
    headers fail with precise errors before the semantic decode runs.

    Args:
        data: Complete FIT file contents.

    Returns:
        ParsedFile with the header, the raw data section and one decoded
        record per data message.

    Raises:
        InvalidHeaderError: On framing violations.
        FitParseError: On decode failures; FitCRCError for checksum mismatches.
    """
    header, data_section = split_file(data)
    data_messages = count_data_messages(data_section)
    records = decode_records(data)

    if len(records) != data_messages:
        raise FitParseError(
            f"decoded {len(records)} records but the data section holds "
            f"{data_messages} data messages"
        )
    return ParsedFile(header=header, data_section=data_section, records=records)


def process(data: bytes, options: Optional[ProcessingOptions] = None) -> ProcessedOutput:
    """Decode a FIT payload, derive a summary, filter/override fields and re-encode.

    The function performs four stages:
    1. parse() splits the payload and decodes the records.
    2. Workout analytics derive the summary and, when smoothing, per-record
       speed/distance overrides.
    3. The data section is rewritten at the byte level and the file is rebuilt
       with a new header length and CRCs.
    4. The rewritten file is decoded again, so the returned records always
       match the returned bytes.

    Args:
        data: Complete FIT file contents.
        options: Processing toggles, defaults to ProcessingOptions().

    Returns:
        ProcessedOutput with the post-filter records, the re-encoded bytes and
        the workout summary.
    """
    options = options or ProcessingOptions()
    parsed = parse(data)
    derived = derive_workout_data(parsed.records, options)

    data_section = rewrite_data_section(parsed.data_section, options, derived.overrides)
    processed_bytes = reencode(
        parsed.header.header_without_crc, parsed.header.has_header_crc, data_section
    )
    records = decode_records(processed_bytes)

    logger.info(
        "Processed %d records (%d -> %d bytes)", len(records), len(data), len(processed_bytes)
    )
    return ProcessedOutput(records=records, processed_bytes=processed_bytes, summary=derived.summary)


def process_file(path: str, options: Optional[ProcessingOptions] = None) -> ProcessedOutput:
    """Read a FIT file from disk and run process() on it.

    Raises:
        FitFileNotFoundError: If ``path`` does not exist.
    """
    fit_path = Path(path)
    if not fit_path.is_file():
        raise FitFileNotFoundError(str(path))
    return process(fit_path.read_bytes(), options)


def records_to_frame(records: Sequence[DecodedRecord]) -> pd.DataFrame:
    """Flatten decoded records into one row per field."""
    rows = [
        {
            "record_index": idx,
            "message": record.name,
            "field": f.name,
            "value": f.value,
            "units": f.units or "",
        }
        for idx, record in enumerate(records)
        for f in record.fields
    ]
    return pd.DataFrame(rows, columns=["record_index", "message", "field", "value", "units"])


def _summary_row(path: str, summary: WorkoutSummary, tz_name: str) -> Dict[str, Any]:
    """Create the CSV row for one processed file."""
    start_local = summary.start_time.astimezone(tz.gettz(tz_name)) if summary.start_time else None
    duration = summary.duration_seconds
    distance = summary.distance_meters

    return {
        "file": Path(path).name,
        "sport": summary.workout_type or "",
        "date": start_local.date().isoformat() if start_local else "",
        "start_time": start_local.strftime("%Y-%m-%d %H:%M:%S") if start_local else "",
        "duration_min": round(duration / 60.0, 1) if duration is not None else "",
        "distance_km": round(distance / 1000.0, 2) if distance is not None else "",
        "avg_speed_ms": round(summary.speed_mean, 3) if summary.speed_mean is not None else "",
        "avg_pace": format_pace(summary.speed_mean),
        "avg_hr": round(summary.heart_rate_mean, 1) if summary.heart_rate_mean is not None else "",
        "max_hr": int(summary.heart_rate_max) if summary.heart_rate_max is not None else "",
    }


def parse_arguments(args=None):
    """Parse command line arguments"""
    ap = argparse.ArgumentParser(
        description="Filter, smooth and re-encode FIT activity files."
    )
    ap.add_argument("fit_files", nargs="+")
    ap.add_argument(
        "--remove-speed", action="store_true", help="Drop speed/enhanced_speed from records"
    )
    ap.add_argument(
        "--smooth-speed", action="store_true", help="Smooth speed and rewrite distance/speed"
    )
    ap.add_argument(
        "--window",
        type=int,
        default=SPEED_SMOOTHING_WINDOW,
        help="Moving average window in samples",
    )
    ap.add_argument("--output-dir", type=str, default=DEFAULT_OUTPUT_DIR, help="Output directory")
    ap.add_argument("--tz", type=str, default=DEFAULT_TIMEZONE)
    ap.add_argument("--dump-records", action="store_true", help="Save decoded records to CSV")
    ap.add_argument(
        "--inspect", action="store_true", help="Print definition messages without processing"
    )
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return ap.parse_args(args)


def _inspect_single_file(fit_file: str) -> None:
    """Validate one file and print its definition messages"""
    fit_path = Path(fit_file)
    if not fit_path.is_file():
        raise FitFileNotFoundError(fit_file)
    parsed = parse(fit_path.read_bytes())

    print(f"\n🔎 {fit_path.name}: {len(parsed.records)} data messages")
    for definition in read_definitions(parsed.data_section):
        kind = MessageKind.from_number(definition.global_message_number)
        print(
            f"   local {definition.local_message_number:2d} -> {kind.name.lower()} "
            f"(global {definition.global_message_number}), "
            f"{len(definition.fields)} fields, {definition.data_size} bytes, "
            f"{definition.byteorder}-endian"
        )


def _process_single_file(fit_file: str, options: ProcessingOptions, args) -> Dict[str, Any]:
    """Process one file, write its outputs and return its summary row"""
    processed = process_file(fit_file, options)
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = Path(fit_file).stem
    out_path = output_dir / f"{stem}_processed.fit"
    out_path.write_bytes(processed.processed_bytes)

    print(f"\n✅ Created: {out_path}")
    for label, value in summary_rows(processed.summary):
        print(f"   {label}: {value}")

    if args.dump_records:
        csv_path = output_dir / f"{stem}_records.csv"
        records_to_frame(processed.records).to_csv(csv_path, index=False)
        print(f"   Records saved to: {csv_path}")

    return _summary_row(fit_file, processed.summary, args.tz)


def main_with_args(args) -> int:
    """Main function that takes parsed arguments"""
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        options = ProcessingOptions(
            remove_speed_fields=args.remove_speed,
            smooth_speed=args.smooth_speed,
            smoothing_window=args.window,
        )
        if tz.gettz(args.tz) is None:
            raise ConfigurationError(f"unknown time zone: {args.tz}")
    except FitPrepError as e:
        print(f"❌ {e}")
        return 1

    rows: List[Dict[str, Any]] = []
    failed = 0
    for fit_file in args.fit_files:
        try:
            if args.inspect:
                _inspect_single_file(fit_file)
                continue
            rows.append(_process_single_file(fit_file, options, args))
        except FitPrepError as e:
            failed += 1
            print(f"❌ {fit_file}: {e}")

    if args.inspect:
        return 1 if failed else 0

    if rows:
        out = pd.DataFrame(rows).sort_values(["date", "start_time"])
        csv_path = Path(args.output_dir) / "workout_summary.csv"
        out.to_csv(csv_path, index=False)
        print(f"\n✅ Created: {csv_path}")
        print(out.to_string(index=False))
    else:
        print("No data to output.")

    return 1 if failed else 0


def main():
    """Main entry point for command line"""
    args = parse_arguments()
    return main_with_args(args)


if __name__ == "__main__":
    raise SystemExit(main())
