class TrackerError(Exception):
    """Base class for errors the HTTP layer knows how to report."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    status_code = 400


class NoActiveProjectError(TrackerError):
    status_code = 400


class PersistenceError(TrackerError):
    status_code = 500
