class OcrError(Exception):
    """Raised when text cannot be extracted from a document."""
