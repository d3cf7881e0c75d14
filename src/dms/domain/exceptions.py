"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the sync loop can catch them per record and the CLI can display them.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class SourceUnavailableError(DomainException):
    """The digital menu order source could not be read."""
