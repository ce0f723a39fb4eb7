from __future__ import annotations

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class DirectoryError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreError(DirectoryError):
    """The data service reported a failure for a request."""


class QueryError(DirectoryError):
    """A paginated request failed; subclasses only differ in which request."""


class CountError(QueryError):
    pass


class DataError(QueryError):
    pass


class UnexpectedError(DirectoryError):
    def __init__(self, message: str = UNEXPECTED_ERROR_MESSAGE) -> None:
        super().__init__(message)
