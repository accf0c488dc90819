"""Typed failures raised by the conversion pipeline.

Every stage error derives from ``ConversionError`` so the HTTP layer can turn
any of them into a single error response. ``error_code`` and ``status_code``
drive that translation.
"""


class ConversionError(Exception):
    error_code = "CONVERSION_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def with_context(self, context: str) -> "ConversionError":
        """Return a copy of this error with a stage-identifying prefix."""
        return type(self)(f"{context}: {self.message}")


class ReadFailure(ConversionError):
    """The input file could not be read."""
    error_code = "READ_FAILURE"


class ParseFailure(ConversionError):
    """Every parser strategy failed."""
    error_code = "PARSE_FAILURE"
    status_code = 422


class DepthExceeded(ConversionError):
    """The document is nested deeper than the configured bound."""
    error_code = "DEPTH_EXCEEDED"
    status_code = 422


class WriteFailure(ConversionError):
    """The workbook could not be serialized or written."""
    error_code = "WRITE_FAILURE"


class CleanupFailure(ConversionError):
    """A staging file could not be deleted. Logged, never raised to callers."""
    error_code = "CLEANUP_FAILURE"
