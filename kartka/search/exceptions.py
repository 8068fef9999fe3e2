class SearchError(Exception):
    """Raised when the external search utility cannot be started."""
