"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class StoreAPIError(DomainException):
    """Transaction store returned an error or is unavailable"""

    pass


class SubAccountNotFoundError(DomainException):
    """No sub-account with the requested id exists in the snapshot"""

    pass


class CycleTrackingDisabledError(DomainException):
    """Sub-account exists but has no enabled billing cycle"""

    pass


class NothingToSettleError(DomainException):
    """Requested cycle has no outstanding debt"""

    pass


class CycleNotFoundError(DomainException):
    """No generated cycle carries the requested cycle id"""

    pass
