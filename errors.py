# errors.py
"""Failure kinds surfaced by the record operations."""


class RecordError(Exception):
    """Base class for record failures. ``message`` is safe to show to the user."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __eq__(self, other):
        return type(self) is type(other) and self.message == other.message

    def __hash__(self):
        return hash((type(self), self.message))


class ValidationFailure(RecordError, ValueError):
    """Form data failed a field rule; the store is never contacted."""


class DuplicateVin(RecordError):
    """The store rejected a write because the VIN is already registered."""

    def __init__(self, vin_number):
        super().__init__(f"VIN number {vin_number} already exists in the system")
        self.vin_number = vin_number


class NotFound(RecordError):
    """No record (or part index) matched. An expected outcome, not an error."""


class StoreFailure(RecordError):
    """Any other store-side fault."""
