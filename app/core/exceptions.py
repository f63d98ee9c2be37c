"""
Error types shared by the relay, the image store and the email layer.

Relay errors carry the HTTP status they map to; the API layer renders them
as ``{"error": ..., "details": ...}`` bodies.
"""
from typing import Any, Optional


class RelayError(Exception):
    """Base class for image-generation relay failures."""
    status_code = 500

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class MissingPromptError(RelayError):
    status_code = 400

    def __init__(self, message: str = "Prompt is required"):
        super().__init__(message)


class ProviderConfigurationError(RelayError):
    status_code = 500


class UpstreamProviderError(RelayError):
    """Non-2xx response or transport failure talking to the image provider."""
    status_code = 500


class ImageExtractionError(RelayError):
    status_code = 500

    def __init__(self, details: Any = None):
        super().__init__("Could not extract image from response", details=details)


class ImageTooLargeError(RelayError):
    status_code = 413

    def __init__(self, size: int, limit: int):
        super().__init__(
            "Generated image exceeds the maximum allowed size",
            details={"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


class AssetUploadError(RelayError):
    status_code = 500


class UnauthenticatedError(Exception):
    """Raised when the image store is used before an owner is set."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class ImageNotFoundError(Exception):
    pass


class EmailValidationError(ValueError):
    pass


class EmailDeliveryError(Exception):
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details
