"""
Exception types shared by the store and the request gateway.

Validation failures and missing records are expected outcomes that
the gateway reports to the caller with a descriptive message.
Persistence faults abort the operation that triggered them and are
reported as a generic server error.
"""


class RegistryError(Exception):
    """Base class for every error raised by the registry."""


class ValidationFailure(RegistryError):
    """Client supplied input that cannot be turned into a store call."""


class ResourceNotFound(RegistryError):
    """A well-formed request referenced a record that does not exist."""

    def __init__(self, resource_id: str) -> None:
        super().__init__("Resource not found")
        self.resource_id = resource_id


class PersistenceError(RegistryError):
    """Reading or writing the backing file failed."""


class StoreCorruptedError(PersistenceError):
    """The backing file exists but does not hold a valid document."""
