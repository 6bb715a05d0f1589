"""Exceptions raised by the database layer."""


class DatabaseError(Exception):
    """Base class for application-specific database errors."""


class DatabaseConfigurationError(DatabaseError):
    """DATABASE_URL is missing or unusable. Fatal at startup."""


class AdapterNotInitializedError(DatabaseError):
    """A query was issued before connect() or after disconnect()."""


class DatabaseNotHealthyError(DatabaseError):
    """The database connected but failed its post-connect health probe."""


class UnsupportedOrmTypeError(DatabaseError, ValueError):
    """An explicit ORM type outside the supported set was requested."""
