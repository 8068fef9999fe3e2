class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class IndexWriteError(ProcessorError):
    """Raised when the shared index directory cannot be written."""


class SourceRetireError(ProcessorError):
    """Raised when a processed scan cannot be removed from the scan directory."""


class ConversionError(ProcessorError):
    """Raised when an image scan cannot be converted to PDF."""
