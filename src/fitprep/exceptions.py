"""
Custom exceptions for fitprep.

Defines specific exception types for better error handling and debugging.
"""


class FitPrepError(Exception):
    """Base exception for all fitprep errors."""


class FitFileError(FitPrepError):
    """Exception raised for FIT file processing errors."""

    prefix = "FIT file error"

    def __init__(self, reason: str):
        super().__init__(f"{self.prefix}: {reason}")
        self.reason = reason


class FitFileNotFoundError(FitFileError):
    """Exception raised when a FIT file cannot be found."""

    prefix = "FIT file not found"


class InvalidHeaderError(FitFileError):
    """Exception raised for framing violations in the FIT byte stream."""

    prefix = "Invalid FIT file"


class FitParseError(FitFileError):
    """Exception raised when the FIT message stream cannot be decoded."""

    prefix = "Failed to decode FIT file"


class FitCRCError(FitParseError):
    """Exception raised when a header or file checksum does not match."""


class ConfigurationError(FitPrepError):
    """Exception raised for invalid processing options."""
