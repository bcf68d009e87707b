"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DebtValidationError(DomainException):
    """Debt record is malformed and cannot enter the late-fee calculator"""

    pass


class NotificationDeliveryError(DomainException):
    """Reminder webhook kept failing after all retries"""

    pass
