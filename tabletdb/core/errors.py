"""Domain-specific errors for tabletdb."""


class TabletdbError(Exception):
    """Base error for tabletdb."""


class InvalidArgumentError(TabletdbError):
    """Raised when a required argument is missing or empty."""


class InvalidDatabaseError(TabletdbError):
    """Raised when the database handle is missing or already closed."""


class InvalidPathError(TabletdbError):
    """Raised when a device path cannot be found or is not a tablet."""


class UnknownModelError(TabletdbError):
    """Raised when no device record matches the query."""


class UnsupportedBusError(UnknownModelError):
    """Raised when the device sits on a bus that cannot be resolved."""


class DescriptorParseError(TabletdbError):
    """Raised when a descriptor file cannot be read or parsed."""


class MatchKeyError(TabletdbError):
    """Raised when a match key cannot be encoded or decoded."""


class EnumeratorError(TabletdbError):
    """Raised when the device enumeration backend fails."""
