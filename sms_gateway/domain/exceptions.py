"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransactionNotFoundError(DomainException):
    """No stored transaction matches the requested id"""

    pass


class InvalidReviewActionError(DomainException):
    """Review action requested on a transaction that is not pending review"""

    pass


class InvalidTaxonomyError(DomainException):
    """Category taxonomy configuration is malformed"""

    pass


class NotificationDeliveryError(DomainException):
    """Review webhook could not be delivered after all retries"""

    pass
