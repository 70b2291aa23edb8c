"""
Tests for registration, sign-in and the profile
"""
import pytest

from ledger.accounts import AccountService
from ledger.errors import AuthenticationError, ValidationError
from ledger.session import UserSession


def register(service, **overrides):
    fields = dict(email="jane@example.com", password="secret123", full_name="Jane Doe",
                  contact="0772000000", district="Kampala")
    fields.update(overrides)
    return service.register(**fields)


class TestRegister:
    def test_new_account_starts_empty(self, app):
        user = register(AccountService())

        assert user.balance == 0
        assert user.referral_count == 0
        assert user.referred_by is None
        assert user.total_commission == 0
        assert user.is_admin is False
        assert user.join_date is not None
        assert user.password_hash != "secret123"

    def test_email_is_normalised(self, app):
        user = register(AccountService(), email="  Jane@Example.COM ")

        assert user.email == "jane@example.com"

    @pytest.mark.parametrize("overrides, message", [
        ({"full_name": ""}, "Please fill in your Full Name, Contact, and District to register."),
        ({"district": "  "}, "Please fill in your Full Name, Contact, and District to register."),
        ({"password": ""}, "Email and password are required."),
        ({"email": "not-an-email"}, "Invalid email format."),
        ({"password": "12345"}, "Password should be at least 6 characters."),
    ])
    def test_validation_messages(self, app, overrides, message):
        with pytest.raises(ValidationError) as exc:
            register(AccountService(), **overrides)

        assert exc.value.message == message

    def test_duplicate_email(self, app):
        service = AccountService()
        register(service)

        with pytest.raises(ValidationError) as exc:
            register(service, email="JANE@example.com")

        assert exc.value.message == "This email is already registered."


class TestAuthenticate:
    def test_correct_password(self, app):
        service = AccountService()
        user = register(service)

        session = service.authenticate("jane@example.com", "secret123")

        assert session == UserSession(user.user_id)

    @pytest.mark.parametrize("email, password", [
        ("jane@example.com", "wrong-password"),
        ("nobody@example.com", "secret123"),
    ])
    def test_bad_credentials(self, app, email, password):
        service = AccountService()
        register(service)

        with pytest.raises(AuthenticationError) as exc:
            service.authenticate(email, password)

        assert exc.value.message == "Invalid email or password."
        assert exc.value.status_code == 401


class TestProfile:
    def test_profile_fields(self, app):
        service = AccountService()
        user = register(service)

        profile = service.get_profile(UserSession(user.user_id))

        assert profile["displayName"] == "Jane Doe"
        assert profile["shortId"] == f"ID: {user.user_id[:6]}..."
        assert profile["referralCode"] == user.referral_code
        assert profile["balance"] == 0

    def test_profile_requires_sign_in(self, app):
        with pytest.raises(AuthenticationError):
            AccountService().get_profile(UserSession.signed_out())
