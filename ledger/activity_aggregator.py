"""
Activity Aggregator: one time-ordered history out of three record kinds.

Deposits count as money in, withdrawals and investments as money out.
An investment always shows as Completed here: the purchase happened, even
while the investment itself is still running its cycle.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Iterator, Optional

from models import RechargeRequest, WithdrawalRequest, Investment
from ledger.errors import AggregationError, LedgerError
from ledger.store import DocumentStore


logger = logging.getLogger(__name__)

DEPOSIT = "Deposit"
WITHDRAWAL = "Withdrawal"
INVESTMENT = "Investment"
COMPLETED = "Completed"


@dataclass(frozen=True)
class ActivityEntry:
    type: str
    amount: int
    date: Optional[datetime]
    status: str
    detail: str

    def to_dict(self):
        data = asdict(self)
        data["date"] = self.date.isoformat() if self.date else None
        return data


def map_deposit_to_activity(recharge: RechargeRequest) -> ActivityEntry:
    return ActivityEntry(
        type=DEPOSIT,
        amount=recharge.amount,
        date=recharge.request_date,
        status=recharge.status,
        detail=f"{recharge.method or 'Deposit'} ({recharge.momo_number})",
    )


def map_withdrawal_to_activity(withdrawal: WithdrawalRequest) -> ActivityEntry:
    return ActivityEntry(
        type=WITHDRAWAL,
        amount=-withdrawal.amount,
        date=withdrawal.request_date,
        status=withdrawal.status,
        detail=f"{withdrawal.method or 'Withdrawal'} ({withdrawal.payout_number})",
    )


def map_investment_to_activity(investment: Investment) -> ActivityEntry:
    return ActivityEntry(
        type=INVESTMENT,
        amount=-investment.investment_amount,
        date=investment.start_date,
        status=COMPLETED,
        detail=investment.product_name or investment.product_id,
    )


def _sort_key(entry: ActivityEntry):
    # undated entries sink to the end
    return entry.date.timestamp() if entry.date else float("-inf")


class ActivityAggregator:
    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or DocumentStore()

    def _fetch(self, model, mapper, user_id):
        try:
            rows = self.store.query(model, user_id=user_id)
        except LedgerError as e:
            logger.error(f"Activity query on {model.__tablename__} failed for user {user_id}: {e}")
            raise AggregationError() from e
        return [mapper(row) for row in rows]

    def get_activity(self, user_id: str) -> Iterator[ActivityEntry]:
        """
        Newest first. Nothing is queried until iteration starts, and each
        call queries again. If any of the three queries fails the whole
        history fails with AggregationError.
        """
        entries = []
        entries += self._fetch(RechargeRequest, map_deposit_to_activity, user_id)
        entries += self._fetch(WithdrawalRequest, map_withdrawal_to_activity, user_id)
        entries += self._fetch(Investment, map_investment_to_activity, user_id)
        entries.sort(key=_sort_key, reverse=True)
        yield from entries
