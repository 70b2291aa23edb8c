# ==========================================================
#                  EXCEPTIONS
# ==========================================================


class LedgerError(Exception):
    """Base ledger exception; str(exc) is safe to show to the user"""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class ValidationError(LedgerError):
    default_message = "Invalid request"


class AuthenticationError(LedgerError):
    status_code = 401
    default_message = "Invalid email or password."


class InsufficientFundsError(LedgerError):
    status_code = 402
    default_message = "Insufficient balance"


class UserNotFoundError(LedgerError):
    status_code = 404
    default_message = "User not found"


class ProductNotFoundError(LedgerError):
    status_code = 404
    default_message = "Product not found"


class ReferralCodeCollisionError(LedgerError):
    status_code = 409
    default_message = "Referral code already belongs to another account"


class AggregationError(LedgerError):
    status_code = 503
    default_message = "Failed to load activity"


class StoreUnavailableError(LedgerError):
    status_code = 503
    default_message = "Service temporarily unavailable"


class TransactionConflict(Exception):
    """A guarded write found the document changed since it was read. Retried by the store."""
