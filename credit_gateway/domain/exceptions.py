"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class HistoryFetchError(DomainException):
    """Block explorer returned an error or is unavailable"""

    pass


class InvalidTransactionDataError(DomainException):
    """Transaction data is malformed or invalid"""

    pass


class TransactionSubmissionError(DomainException):
    """Signing relay rejected or failed to broadcast a transfer"""

    pass


class CreditPolicyError(DomainException):
    """Requested borrow/repay violates credit line policy"""

    pass


class InvalidAmountError(CreditPolicyError):
    """Amount must be strictly positive"""

    pass


class InsufficientCreditError(CreditPolicyError):
    """Borrow amount exceeds available credit"""

    pass


class ExcessRepaymentError(CreditPolicyError):
    """Repayment amount exceeds outstanding debt"""

    pass
