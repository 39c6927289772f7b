"""Exception types used inside the attribute store.

None of these escape `AttributeService`; the service converts them into
its documented failure values.
"""


class AttributeStoreError(Exception):
    """Base class for attribute store errors."""


class CodecError(AttributeStoreError):
    """A stored packet could not be decoded."""


class LockTimeoutError(AttributeStoreError):
    """A record lock could not be acquired within the configured wait."""

    def __init__(self, key: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:.2f}s waiting for lock {key!r}")
        self.key = key
        self.timeout = timeout


class ConfigurationError(AttributeStoreError):
    """The storage root is missing or not writeable."""
