import itertools
import os

os.environ.setdefault("FLASK_ENV", "testing")

import pytest  # noqa: E402
from sqlalchemy import update  # noqa: E402

from app import create_app  # noqa: E402
from config import TestingConfig  # noqa: E402
from extensions import db  # noqa: E402
from models import User  # noqa: E402
from ledger.accounts import AccountService  # noqa: E402
from ledger.session import UserSession  # noqa: E402


_emails = itertools.count(1)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _set_balance(user_id, balance):
    db.session.execute(
        update(User).where(User.user_id == user_id).values(balance=balance)
    )
    db.session.commit()


@pytest.fixture
def set_balance(app):
    return _set_balance


@pytest.fixture
def make_user(app):
    """Register a user and optionally fund them. Returns the User row."""
    accounts = AccountService()

    def _make_user(balance=0, full_name="Test User", referred_by=None, password="secret123"):
        email = f"user{next(_emails)}@example.com"
        user = accounts.register(
            email=email,
            password=password,
            full_name=full_name,
            contact="0772000000",
            district="Kampala",
            referred_by_code=referred_by,
        )
        if balance:
            _set_balance(user.user_id, balance)
        return db.session.get(User, user.user_id)

    return _make_user


@pytest.fixture
def user_session(make_user):
    """Session for a user holding UGX 1,000"""
    return UserSession(make_user(balance=1000).user_id)
