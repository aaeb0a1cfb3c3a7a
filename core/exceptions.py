"""Custom exception hierarchy for the study-material backend."""

from __future__ import annotations


class GyankunjError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(GyankunjError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(GyankunjError):
    """Base class for client-side request errors."""
    pass


class UnsupportedMediaTypeError(ValidationError):
    """Raised when an upload is not declared as a PDF."""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(
            "Only PDF files are allowed!",
            {"content_type": content_type or ""},
        )


class MissingFileError(ValidationError):
    """Raised when an upload request carries no file content."""

    def __init__(self) -> None:
        super().__init__("No file uploaded.")


class MissingTopicError(ValidationError):
    """Raised when an upload request does not name a topic."""

    def __init__(self) -> None:
        super().__init__("Topic is required.")


class TopicNotFoundError(GyankunjError):
    """Raised by a material store when no record exists for a topic."""

    def __init__(self, topic: str) -> None:
        super().__init__("Topic not found", {"topic": topic})
        self.topic = topic


class UnknownTopicError(GyankunjError):
    """Raised when an upload targets a topic that has no record."""

    def __init__(self, topic: str, object_name: str | None = None) -> None:
        details = {"topic": topic}
        if object_name:
            details["orphaned_object"] = object_name
        super().__init__("Topic not found for upload.", details)
        self.topic = topic


class StorageError(GyankunjError):
    """Raised when a storage backend fails."""
    pass


class SinkUnavailableError(StorageError):
    """Raised when the blob sink cannot store an upload."""
    pass


class StoreUnavailableError(StorageError):
    """Raised when the material store cannot be read or written."""
    pass
