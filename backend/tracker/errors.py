"""Error taxonomy shared by the store, the services and the API layer."""


class TrackerError(Exception):
    """Base class for every recoverable error raised by the tracker."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    """A mutation was rejected before reaching the store."""

    status_code = 422


class NotFoundError(TrackerError):
    """The requested record does not exist."""

    status_code = 404


class StoreError(TrackerError):
    """The record store failed to read or commit."""

    status_code = 503


class ImportFormatError(TrackerError):
    """An import payload could not be parsed or has the wrong shape."""

    status_code = 400
