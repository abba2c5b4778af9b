#!/usr/bin/env .venv/bin/python3
"""
Command-line script to preprocess FIT files and generate a workout summary CSV.

Usage:
    ./process.py data/samples/*.fit --remove-speed
    ./process.py data/samples/*.fit --smooth-speed --window 7

Or with explicit python:
    .venv/bin/python3 process.py data/samples/*.fit --remove-speed --smooth-speed
"""

import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from fitprep.processing import main

if __name__ == "__main__":
    sys.exit(main())
