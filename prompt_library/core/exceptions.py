"""
Custom exception classes for the Prompt Library application.
These exceptions provide meaningful error messages and HTTP status codes.
"""
from typing import Any, Optional


class PromptLibraryException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class PromptNotFoundException(PromptLibraryException):
    """Raised when a prompt is not found."""

    def __init__(self, prompt_id: str, operation: Optional[str] = None):
        message = f"Prompt not found: {prompt_id}"
        if operation:
            message = f"{message} (during {operation})"
        super().__init__(message=message, status_code=404)
        self.prompt_id = prompt_id
        self.operation = operation


class HistoryNotFoundException(PromptLibraryException):
    """Raised when an upload history entry is not found."""

    def __init__(self, history_id: str, operation: Optional[str] = None):
        message = f"Upload history entry not found: {history_id}"
        if operation:
            message = f"{message} (during {operation})"
        super().__init__(message=message, status_code=404)
        self.history_id = history_id
        self.operation = operation


class ValidationException(PromptLibraryException):
    """Raised when request data validation fails."""

    def __init__(self, message: str):
        super().__init__(
            message=f"Validation error: {message}",
            status_code=400  # Bad Request
        )


class RatingValidationException(ValidationException):
    """Raised when a rating falls outside the 0-5 range."""

    def __init__(self, rating: Any, prompt_id: Optional[str] = None):
        detail = f"rating must be an integer between 0 and 5, got {rating!r}"
        if prompt_id:
            detail = f"{detail} for prompt {prompt_id}"
        super().__init__(detail)
        self.rating = rating
        self.prompt_id = prompt_id


class DuplicateRecordException(PromptLibraryException):
    """Raised when inserting a record whose id already exists."""

    def __init__(self, entity: str, record_id: str):
        super().__init__(
            message=f"{entity} already exists: {record_id}",
            status_code=409  # Conflict
        )
        self.entity = entity
        self.record_id = record_id


class StorageDecodeException(PromptLibraryException):
    """Raised when a stored row cannot be decoded into its entity type."""

    def __init__(self, entity: str, record_id: Optional[str], error: str):
        super().__init__(
            message=f"Malformed {entity} row {record_id}: {error}",
            status_code=500
        )
        self.entity = entity
        self.record_id = record_id
        self.error = error


class SchemaMigrationException(PromptLibraryException):
    """Raised when creating or migrating the schema fails. Fatal at startup."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Schema migration failed: {error}",
            status_code=500
        )
        self.error = error


class SeedDataException(PromptLibraryException):
    """Raised when loading the built-in seed data fails. Fatal at startup."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Seeding initial data failed: {error}",
            status_code=500
        )
        self.error = error
