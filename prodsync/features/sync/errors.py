"""Custom exceptions for the sync feature.

Version conflicts are not exceptions: they come back as ``ConflictResult``.
"""


class MutationTransportError(RuntimeError):
    """Raised when a REST call fails for network or server reasons."""

    def __init__(self, operation: str, resource: str, detail: str = ""):
        self.operation = operation
        self.resource = resource
        message = f"Failed to {operation} {resource}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EntityNotFoundError(MutationTransportError):
    """Raised when the server no longer has the requested entity."""

    def __init__(self, resource: str, uuid: str):
        self.uuid = uuid
        super().__init__("find", resource, f"'{uuid}' not found")


class UnknownEntityError(ValueError):
    """Raised when an operation names a uuid the cache does not hold."""

    def __init__(self, uuid: str):
        self.uuid = uuid
        super().__init__(f"Entity '{uuid}' is not in the collection")


class InvalidReorderError(ValueError):
    """Raised when a drag names an impossible position or happens out of order."""


class InvalidPushEventError(ValueError):
    """Raised when a socket message cannot be read as a push event."""
