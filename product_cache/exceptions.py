# product_cache/exceptions.py

"""Exceptions raised by the data-access collaborators."""


class ProductCacheError(Exception):
    """Base class for collaborator failures."""


class RemoteFetchError(ProductCacheError):
    """The remote API could not produce a valid response.

    Covers transport errors, timeouts, non-200 statuses and bodies that
    do not parse into the expected shape.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class StorageError(ProductCacheError):
    """The local product store faulted on a read or write."""
