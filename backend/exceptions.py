"""
Custom exception classes for the client-side tip flow.
"""


class TipError(Exception):
    """Base class for tip submission failures. ``str(exc)`` is user-facing."""
    pass


class WalletNotConnectedError(TipError):
    """Raised when a direct transfer is requested without a connected wallet."""
    pass


class UserRejectedError(TipError):
    """Raised when the wallet owner rejects the transaction request."""
    pass


class TransactionFailedError(TipError):
    """Raised when a transaction fails to submit or reverts on-chain."""
    pass


class NetworkError(TipError):
    """Raised when the tip API cannot be reached."""
    pass


class TipSubmissionError(TipError):
    """Raised when the tip API rejects the request or returns no payment link."""
    pass


class FormValidationError(TipError):
    """Raised when tip form input fails validation before submission."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(next(iter(errors.values()), "Invalid input"))
