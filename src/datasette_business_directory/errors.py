"""Exceptions raised by the directory workflows and record stores."""


class DirectoryError(Exception):
    """Base class for all directory errors."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DirectoryError):
    """Client-caused error: missing or malformed input. Never retried."""

    default_message = "Invalid input."


class MissingField(ValidationError):
    """A required field was absent or empty."""


class StoreError(DirectoryError):
    """The record store could not complete an operation."""


class StoreNotConfigured(StoreError):
    default_message = "Server record store is not configured."


class StoreReadFailed(StoreError):
    default_message = "Failed to read from the record store."


class StoreWriteFailed(StoreError):
    default_message = "Failed to write to the record store."


class InsertFailed(StoreWriteFailed):
    default_message = "Failed to insert business."


class DeleteFailed(StoreWriteFailed):
    default_message = "Failed to delete suggestion."
