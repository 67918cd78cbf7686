"""Exceptions raised by logwatch."""


class ConfigError(Exception):
    """Raised when configuration is invalid."""

    pass


class SetupError(Exception):
    """Raised when required directories cannot be created."""

    pass


class LockUnavailable(Exception):
    """Raised when another run holds the lock for a source."""

    pass


class OffsetPersistError(Exception):
    """Raised when an offset cannot be written to disk."""

    pass
