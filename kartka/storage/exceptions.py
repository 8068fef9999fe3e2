class StorageError(Exception):
    """Raised when a remote storage operation fails (auth, network, missing blob)."""
