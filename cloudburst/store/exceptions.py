# cloudburst/store/exceptions.py

class StoreError(Exception):
    """Base class for key-value store errors."""
    pass

class StoreUnavailableError(StoreError):
    """The store could not be reached. Recoverable; the caller retries."""
    def __init__(self, path=None, message="Store unavailable"):
        self.path = path
        super().__init__(f"{message} [Path: {path}]" if path else message)
