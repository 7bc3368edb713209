"""Domain-level exceptions.

Every failure the order service can signal is a subclass of DomainException
so the CLI layer can catch them uniformly and translate each kind into the
right user-facing outcome.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A value or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested order does not exist."""


class PersistenceError(DomainException):
    """The backing store could not complete a read, save or delete."""
