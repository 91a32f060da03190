"""Exceptions raised by the store and service layers."""


class HabitTrackerError(Exception):
    """Base class for all application errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HabitTrackerError):
    """Input rejected before reaching the store."""

    status_code = 422


class NotFoundError(HabitTrackerError):
    """Record does not exist for this owner."""

    status_code = 404


class StoreError(HabitTrackerError):
    """Persistence failure while reading or writing."""

    status_code = 503


class ReadOnlyStoreError(StoreError):
    """Write attempted against a read-only store (demo mode)."""

    status_code = 403
