"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Required input is missing or malformed"""

    pass


class NotFoundError(DomainException):
    """No record exists for the given identifier"""

    pass


class ForbiddenError(DomainException):
    """Actor's role or ownership does not allow the operation"""

    pass


class ConflictError(DomainException):
    """Operation would violate a uniqueness rule"""

    pass


class DuplicateSubmissionError(ConflictError):
    """An active settlement already exists for the submitter and date"""

    pass


class InvalidStateTransitionError(DomainException):
    """Record status does not permit the requested transition"""

    pass


class PersistenceError(DomainException):
    """Backing store failed unexpectedly"""

    pass
