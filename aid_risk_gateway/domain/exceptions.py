"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CollaboratorUnavailableError(DomainException):
    """Transaction history or category limit lookup failed or timed out"""

    pass


class LedgerAPIError(CollaboratorUnavailableError):
    """Ledger API returned an error, timed out, or sent a malformed payload"""

    pass


class InvalidTransactionDataError(DomainException):
    """Candidate transaction is malformed (negative amount, missing category)"""

    pass
