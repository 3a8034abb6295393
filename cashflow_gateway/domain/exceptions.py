"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ProjectionError(DomainException):
    """Projection input is malformed and cannot be computed"""

    pass


class InvalidScheduleError(ProjectionError):
    """Payment schedule shape doesn't match its frequency or holds out-of-range values"""

    pass


class InvalidHorizonError(ProjectionError):
    """Projection horizon is non-positive or not an integer"""

    pass


class InvalidAmountError(ProjectionError):
    """Money value is not an integer number of cents"""

    pass


class EntityNotFoundError(DomainException):
    """Requested finance entity does not exist"""

    pass


class DuplicateFutureStatementError(DomainException):
    """A future statement already exists for this card, month and year"""

    pass


class ChangeNotificationError(DomainException):
    """Change webhook rejected the event or is unavailable"""

    pass
