"""Custom exception classes for MIME registry operations."""

from typing import Optional


class MimeError(Exception):
    """
    Base exception class for all mime tool errors.
    """
    pass


class ResourceError(MimeError):
    """
    Raised when a resource source cannot be opened or is not a valid container.
    """
    pass


class MissingFieldError(ResourceError):
    """
    Raised when a mandatory resource block is absent.
    """

    def __init__(self, field: str, path: str):
        self.field = field
        self.path = path
        super().__init__(f"missing mandatory resource {field} in {path}")


class InvalidTypeError(MimeError):
    """
    Raised when a string is not a syntactically valid MIME type.
    """

    def __init__(self, identifier: str, reason: str):
        self.identifier = identifier
        self.reason = reason
        super().__init__(f"{identifier!r} is not a valid MIME type: {reason}")


class RegistryError(MimeError):
    """
    Raised when the registry service rejects a request.
    """

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class AlreadyInstalledError(RegistryError):
    """
    Raised when installing a MIME type that is already in the registry.
    """
    pass


class NotInstalledError(RegistryError):
    """
    Raised when a MIME type is not present in the registry.
    """
    pass


class RegistryTransportError(RegistryError):
    """
    Raised when the registry service is unreachable, times out or returns a malformed reply.
    """
    pass
