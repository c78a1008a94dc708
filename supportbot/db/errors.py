class StorageError(Exception):
    """Base class for every failure raised by the storage layer."""


class NotInitialized(StorageError):
    def __init__(self):
        super().__init__("Database not initialized")


class StorageUnavailable(StorageError):
    """The backing store could not be reached or its schema created."""


class StorageWriteError(StorageError):
    pass


class StorageReadError(StorageError):
    pass
