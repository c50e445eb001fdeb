class TrackerError(Exception):
    """Base class for data access failures."""


class ValidationError(TrackerError):
    """A required field is missing or malformed."""


class NotFound(TrackerError):
    """The referenced record does not exist."""


class StoreError(TrackerError):
    """The document store failed to complete an operation."""
