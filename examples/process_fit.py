#!/usr/bin/env python3
"""
Example script demonstrating how to use the fitprep library.

This script shows how to:
1. Parse a FIT file and list its messages
2. Remove speed fields and smooth distance/speed
3. Print the workout summary and save the processed file
"""

import sys
from collections import Counter
from pathlib import Path

# Add src to path if running without installation
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from fitprep import FitPrepError, ProcessingOptions, parse, process
from fitprep.formatting import summary_rows


def main():
    """Run example FIT file preprocessing."""
    # Path to sample FIT files
    data_dir = Path(__file__).parent.parent / "data" / "samples"

    if not data_dir.exists():
        print(f"Error: Data directory not found: {data_dir}")
        return 1

    # Find first FIT file
    fit_files = list(data_dir.glob("*.fit"))
    if not fit_files:
        print(f"No FIT files found in {data_dir}")
        return 1

    fit_file = fit_files[0]
    print(f"Processing: {fit_file.name}")
    print("=" * 60)

    data = fit_file.read_bytes()
    try:
        parsed = parse(data)
        print(f"\n📦 Header: {parsed.header.header_size} bytes, data: {parsed.header.data_size} bytes")
        for name, count in Counter(r.name for r in parsed.records).most_common():
            print(f"   {name}: {count}")

        options = ProcessingOptions(remove_speed_fields=True, smooth_speed=True)
        result = process(data, options)
    except FitPrepError as e:
        print(f"\n❌ Error processing file: {e}")
        return 1

    print("\n📊 Workout Summary:")
    for label, value in summary_rows(result.summary):
        print(f"   {label}: {value}")

    out_path = fit_file.with_name(f"{fit_file.stem}_processed.fit")
    out_path.write_bytes(result.processed_bytes)
    print(f"\n   Saved {len(result.processed_bytes)} bytes to {out_path}")

    print("\n" + "=" * 60)
    print("✅ Processing complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
