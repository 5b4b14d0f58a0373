"""Error taxonomy shared by stores and controllers."""


class BibliotecaError(Exception):
    """Base exception for the admin."""


class ValidationError(BibliotecaError):
    """Raised when a form does not satisfy the field rules; never reaches a store."""


class StoreError(BibliotecaError):
    """Base exception for persistence failures."""


class RemoteUnavailableError(StoreError):
    """Raised when the hosted backend cannot be reached or answers with an error."""


class ConstraintViolationError(StoreError):
    """Raised when the hosted backend rejects a write because of a foreign key."""


class NotFoundError(StoreError):
    """Raised when an update targets an id that does not exist."""


class LocalStorageError(StoreError):
    """Raised when the local snapshot storage cannot be read or written."""
