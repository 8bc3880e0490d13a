"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Operation rejected because an argument is invalid"""

    pass


class InvalidAmountError(InvalidInputError):
    """Amount is not a finite number greater than zero"""

    pass


class InvalidTermError(InvalidInputError):
    """Term in months is missing or below one"""

    pass


class MissingGoldRateError(InvalidInputError):
    """Gold debt without a usable registration rate"""

    pass


class EmptyReasonError(InvalidInputError):
    """Debt increase submitted without a reason"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    pass


class CustomerNotFoundError(NotFoundError):
    pass


class DebtNotFoundError(NotFoundError):
    pass


class InstallmentNotFoundError(NotFoundError):
    pass


class NotApplicableError(DomainException):
    """Operation cannot be applied to the debt in its current shape"""

    pass


class GoldPriceUnavailableError(DomainException):
    """Gold price API returned an error or is unavailable"""

    pass
