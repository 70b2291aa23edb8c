"""
Tests for the document store transaction runner
"""
import pytest

from extensions import db
from models import User
from ledger.errors import (
    InsufficientFundsError,
    StoreUnavailableError,
    TransactionConflict,
)
from ledger.store import DocumentStore, snapshot


class TestRunTransaction:
    def test_commits_result(self, make_user):
        user = make_user(balance=300)
        store = DocumentStore()

        def top_up(tx):
            tx.get(User, user.user_id, version_field="balance_version")
            tx.increment(User, user.user_id, "balance", 200)
            return "done"

        assert store.run_transaction(top_up) == "done"
        db.session.expire_all()
        refreshed = db.session.get(User, user.user_id)
        assert refreshed.balance == 500
        assert refreshed.balance_version == 1

    def test_gives_up_after_max_attempts(self, app):
        calls = []

        def always_conflicts(tx):
            calls.append(1)
            raise TransactionConflict("busy")

        with pytest.raises(StoreUnavailableError):
            DocumentStore(max_attempts=3).run_transaction(always_conflicts)
        assert len(calls) == 3

    def test_domain_error_rolls_back(self, make_user):
        user = make_user(balance=300)

        def spend_then_fail(tx):
            tx.increment(User, user.user_id, "balance", -100)
            raise InsufficientFundsError()

        with pytest.raises(InsufficientFundsError):
            DocumentStore().run_transaction(spend_then_fail)

        db.session.expire_all()
        assert db.session.get(User, user.user_id).balance == 300

    def test_unguarded_increment_is_not_a_conflict(self, make_user):
        user = make_user()

        changed = DocumentStore().increment(User, user.user_id, "referral_count", 1)

        assert changed == 1
        db.session.expire_all()
        assert db.session.get(User, user.user_id).referral_count == 1

    def test_increment_missing_document(self, app):
        assert DocumentStore().increment(User, "nobody", "referral_count", 1) == 0

    def test_debit_never_goes_below_zero(self, make_user):
        """An unguarded debit larger than the balance changes nothing"""
        user = make_user(balance=300)

        changed = DocumentStore().increment(User, user.user_id, "balance", -500)

        assert changed == 0
        db.session.expire_all()
        assert db.session.get(User, user.user_id).balance == 300

    def test_debit_down_to_zero(self, make_user):
        user = make_user(balance=300)

        assert DocumentStore().increment(User, user.user_id, "balance", -300) == 1
        db.session.expire_all()
        assert db.session.get(User, user.user_id).balance == 0


class TestSnapshot:
    def test_snapshot_survives_commit(self, make_user):
        user = make_user(balance=700)

        doc = snapshot(db.session.get(User, user.user_id))
        db.session.commit()

        assert doc["balance"] == 700
        assert doc["user_id"] == user.user_id

    def test_snapshot_of_nothing(self):
        assert snapshot(None) is None
