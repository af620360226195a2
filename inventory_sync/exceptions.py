from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """
    Failure categories surfaced in logs under the ``error_kind`` key.
    """

    CONFIGURATION = "configuration"
    FETCH = "fetch"
    AUTHENTICATION = "authentication"
    REMOTE_REJECTION = "remote_rejection"
    TRANSPORT = "transport"
    SERIALIZATION = "serialization"
    UNEXPECTED = "unexpected"


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, original_exception: Optional[BaseException] = None):
        super().__init__(message)
        self.original_exception = original_exception


class ConfigurationError(ApplicationError):
    """Raised when the remote connector is constructed with incomplete settings."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, missing_settings=None):
        super().__init__(message)
        self.missing_settings = list(missing_settings or [])


class FetchError(ApplicationError):
    """Raised when the inventory snapshot cannot be retrieved or is unusable."""

    kind = ErrorKind.FETCH


class AuthenticationError(ApplicationError):
    """Raised when no usable bearer token could be acquired."""

    kind = ErrorKind.AUTHENTICATION


class RemoteRejectionError(ApplicationError):
    """Raised when the remote platform answers an upsert with a non-success status."""

    kind = ErrorKind.REMOTE_REJECTION

    def __init__(self, message: str, sku: str, status_code: int, response_body: str = ""):
        super().__init__(message)
        self.sku = sku
        self.status_code = status_code
        self.response_body = response_body


class RemoteTransportError(ApplicationError):
    """Raised for network-level failures while talking to the remote platform."""

    kind = ErrorKind.TRANSPORT


class PayloadSerializationError(ApplicationError):
    """Raised when a record cannot be encoded into an upsert payload."""

    kind = ErrorKind.SERIALIZATION


class UnexpectedSyncError(ApplicationError):
    """Raised for any other failure not specifically handled."""

    def __init__(self, message="An unexpected error occurred during synchronization.", original_exception=None):
        super().__init__(message, original_exception=original_exception)
