"""
fitprep - FIT file preprocessing for fitness activity data.

This package provides tools for:
- Validating and decoding FIT activity files
- Removing speed fields or writing smoothed speed/distance back into the file
- Re-encoding files with corrected header length and CRCs
- Summarizing workouts (duration, distance, pace, heart rate)
"""

from .analytics import derive_workout_data
from .exceptions import (
    ConfigurationError,
    FitCRCError,
    FitFileError,
    FitParseError,
    FitPrepError,
    InvalidHeaderError,
)
from .models import (
    DecodedRecord,
    ParsedFile,
    ProcessedOutput,
    ProcessingOptions,
    RecordOverride,
    WorkoutSummary,
)
from .processing import parse, process, process_file

__version__ = "0.1.0"
__author__ = "fitprep Contributors"

__all__ = [
    "parse",
    "process",
    "process_file",
    "derive_workout_data",
    "ProcessingOptions",
    "ProcessedOutput",
    "ParsedFile",
    "DecodedRecord",
    "RecordOverride",
    "WorkoutSummary",
    "FitPrepError",
    "FitFileError",
    "InvalidHeaderError",
    "FitParseError",
    "FitCRCError",
    "ConfigurationError",
]
