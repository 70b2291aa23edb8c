"""
Ledger Service: every balance-affecting or balance-adjacent operation.

``invest`` is the only operation that moves money. It runs as one unit of
work in the document store: the balance check, the delta write on
``users.balance`` and the new ``investments`` row commit together or not at
all, and a concurrent invest for the same user forces a retry that re-reads
and re-checks the balance.

Deposit and withdrawal requests only record a Pending request; approval and
the balance movement it implies happen elsewhere.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from flask import current_app

from models import User, Investment, RechargeRequest, WithdrawalRequest, Product, InvestmentStatus, RequestStatus
from ledger.errors import (
    ValidationError,
    InsufficientFundsError,
    UserNotFoundError,
    ProductNotFoundError,
)
from ledger.session import UserSession
from ledger.store import DocumentStore, Transaction, SERVER_TIMESTAMP
from utils import validate_phone, format_ugx


logger = logging.getLogger(__name__)


class _BalanceUnavailable:
    """Balance of a signed-out session. Not zero, not a number."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "BALANCE_UNAVAILABLE"


BALANCE_UNAVAILABLE = _BalanceUnavailable()


# fits the 32-bit INTEGER money columns on PostgreSQL
MAX_AMOUNT = 1_000_000_000


# ==========================================================
#                  CONFIGURATION
# ==========================================================
class LedgerConfig:
    MAX_AMOUNT = MAX_AMOUNT
    MIN_DEPOSIT = 1000
    MIN_WITHDRAWAL = 10000
    DEPOSIT_METHOD = "MTN Mobile Money"
    WITHDRAWAL_METHOD = "MTN Mobile Money"

    @staticmethod
    def get(key):
        """App config wins over the class defaults"""
        return current_app.config.get(key, getattr(LedgerConfig, key))


def parse_amount(value, field: str = "amount", maximum: int = MAX_AMOUNT) -> int:
    """Whole-shilling amount from user input; rejects fractions, bools, junk and anything above ``maximum``"""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid {field}")
    try:
        exact = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field}")
    if not exact.is_finite():
        raise ValidationError(f"Invalid {field}")
    if exact != exact.to_integral_value():
        raise ValidationError(f"{field.capitalize()} must be a whole number")
    if exact > maximum:
        raise ValidationError(f"{field.capitalize()} cannot exceed {maximum:,}")
    return int(exact)


def _required(value: Optional[str], message: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(message)
    return cleaned


class LedgerService:
    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or DocumentStore()

    # ------------------------------------------------------------------
    # Deposits
    # ------------------------------------------------------------------
    def request_deposit(self, session: UserSession, amount, momo_number: str) -> RechargeRequest:
        """Record a Pending deposit. The balance is untouched until an admin approves it."""
        user_id = session.require_user("Please log in to make a deposit request.")
        amount = parse_amount(amount, maximum=LedgerConfig.get("MAX_AMOUNT"))
        minimum = LedgerConfig.get("MIN_DEPOSIT")
        if amount < minimum:
            raise ValidationError(f"Minimum deposit amount is {format_ugx(minimum)}.")
        momo_number = _required(momo_number, "Mobile money number is required")
        if not validate_phone(momo_number):
            raise ValidationError("Invalid mobile money number")
        if self.store.get(User, user_id) is None:
            raise UserNotFoundError()

        recharge = self.store.create(RechargeRequest(
            user_id=user_id,
            amount=amount,
            method=LedgerConfig.get("DEPOSIT_METHOD"),
            momo_number=momo_number,
            status=RequestStatus.PENDING.value,
            request_date=SERVER_TIMESTAMP,
        ))
        logger.info(f"Deposit request {recharge.id} of UGX {amount} recorded for user {user_id}")
        return recharge

    # ------------------------------------------------------------------
    # Withdrawals
    # ------------------------------------------------------------------
    def request_withdrawal(self, session: UserSession, amount, payout_number: str) -> WithdrawalRequest:
        """
        Record a Pending withdrawal after checking it is covered by the
        current balance. Nothing is held or deducted here.
        """
        user_id = session.require_user("Please log in to request a withdrawal.")
        amount = parse_amount(amount, maximum=LedgerConfig.get("MAX_AMOUNT"))
        minimum = LedgerConfig.get("MIN_WITHDRAWAL")
        if amount < minimum:
            raise ValidationError(f"Minimum withdrawal amount is {format_ugx(minimum)}.")
        payout_number = _required(payout_number, "Payout number is required")
        if not validate_phone(payout_number):
            raise ValidationError("Invalid payout number")

        user = self.store.get(User, user_id)
        if user is None:
            raise UserNotFoundError()
        if amount > user.balance:
            raise InsufficientFundsError(
                f"Insufficient balance. Requested: {amount}, Available: {user.balance}"
            )

        withdrawal = self.store.create(WithdrawalRequest(
            user_id=user_id,
            amount=amount,
            method=LedgerConfig.get("WITHDRAWAL_METHOD"),
            payout_number=payout_number,
            status=RequestStatus.PENDING.value,
            request_date=SERVER_TIMESTAMP,
        ))
        logger.info(f"Withdrawal request {withdrawal.id} of UGX {amount} recorded for user {user_id}")
        return withdrawal

    # ------------------------------------------------------------------
    # Investments
    # ------------------------------------------------------------------
    def invest(self, session: UserSession, product_id: str, product_name: str,
               price, cycle_days, daily_income) -> int:
        """
        Buy an investment with the account balance.
        Returns the balance left after the purchase.
        """
        user_id = session.require_user("Please log in to invest.")
        maximum = LedgerConfig.get("MAX_AMOUNT")
        price = parse_amount(price, "price", maximum=maximum)
        cycle_days = parse_amount(cycle_days, "cycle days", maximum=maximum)
        daily_income = parse_amount(daily_income, "daily income", maximum=maximum)
        if price <= 0:
            raise ValidationError("Price must be greater than zero")
        if cycle_days <= 0:
            raise ValidationError("Cycle days must be greater than zero")
        if daily_income < 0:
            raise ValidationError("Daily income cannot be negative")
        if daily_income * cycle_days > maximum:
            raise ValidationError(f"Total income cannot exceed {maximum:,}")
        product_id = _required(product_id, "Product is required")

        def purchase_investment(tx: Transaction):
            account = tx.get(User, user_id, version_field="balance_version")
            if account is None:
                raise UserNotFoundError()

            balance = account["balance"]
            if balance < price:
                raise InsufficientFundsError(
                    f"Insufficient balance. Required: {price}, Available: {balance}"
                )

            tx.increment(User, user_id, "balance", -price)
            investment = tx.create(Investment(
                user_id=user_id,
                product_id=product_id,
                product_name=product_name,
                investment_amount=price,
                cycle_days=cycle_days,
                daily_income=daily_income,
                total_income=daily_income * cycle_days,
                total_earned=0,
                status=InvestmentStatus.ACTIVE.value,
                days_progress=0,
                start_date=SERVER_TIMESTAMP,
            ))
            return balance - price, investment.id

        new_balance, investment_id = self.store.run_transaction(purchase_investment)
        logger.info(
            f"User {user_id} invested UGX {price} in {product_id} "
            f"(investment {investment_id}); balance now {new_balance}"
        )
        return new_balance

    def invest_in_product(self, session: UserSession, product_id: str) -> int:
        """Buy a catalog product at its listed terms"""
        product = self.store.get(Product, product_id)
        if product is None or not product.is_active:
            raise ProductNotFoundError()
        return self.invest(
            session,
            product.product_id,
            product.name,
            product.price,
            product.cycle_days,
            product.daily_income,
        )

    # ------------------------------------------------------------------
    # Balance
    # ------------------------------------------------------------------
    def get_balance(self, session: UserSession):
        if not session.is_signed_in:
            return BALANCE_UNAVAILABLE
        user = self.store.get(User, session.user_id)
        if user is None:
            raise UserNotFoundError()
        return user.balance
