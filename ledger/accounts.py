"""
Account Service: registration, sign-in and the profile shown on the Me page.

Registration commits the account first and links the referral afterwards,
so a failed referral link never loses a sign-up.
"""
import logging
import uuid
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import User
from ledger.errors import (
    AuthenticationError,
    LedgerError,
    ReferralCodeCollisionError,
    UserNotFoundError,
    ValidationError,
)
from ledger.referral_index import ReferralIndex, derive_referral_code
from ledger.session import UserSession
from ledger.store import DocumentStore, SERVER_TIMESTAMP
from utils import validate_email


logger = logging.getLogger(__name__)


def new_user_id() -> str:
    return uuid.uuid4().hex


class AccountService:
    def __init__(self, store: Optional[DocumentStore] = None, referrals: Optional[ReferralIndex] = None):
        self.store = store or DocumentStore()
        self.referrals = referrals or ReferralIndex(self.store)

    def _email_taken(self, email: str) -> bool:
        return bool(self.store.query(User, email=email))

    def register(self, email: str, password: str, full_name: str, contact: str, district: str,
                 referred_by_code: Optional[str] = None) -> User:
        email = (email or "").strip().lower()
        full_name = (full_name or "").strip()
        contact = (contact or "").strip()
        district = (district or "").strip()
        password = password or ""

        # -----------------------------------------
        #  BASIC VALIDATION
        # -----------------------------------------
        if not full_name or not contact or not district:
            raise ValidationError("Please fill in your Full Name, Contact, and District to register.")
        if not email or not password:
            raise ValidationError("Email and password are required.")
        if not validate_email(email):
            raise ValidationError("Invalid email format.")
        if len(password) < current_app.config.get("MIN_PASSWORD_LENGTH", 6):
            raise ValidationError("Password should be at least 6 characters.")
        if self._email_taken(email):
            raise ValidationError("This email is already registered.")

        user_id = new_user_id()
        referral_code = derive_referral_code(user_id)
        if self.store.query(User, referral_code=referral_code):
            logger.error(f"Referral code {referral_code} derived for {user_id} is already taken")
            raise ReferralCodeCollisionError(
                "We could not assign you a referral code. Please try registering again."
            )

        user = User(
            user_id=user_id,
            full_name=full_name,
            email=email,
            contact=contact,
            district=district,
            balance=0,
            balance_version=0,
            total_commission=0,
            is_admin=False,
            referral_code=referral_code,
            referred_by=None,
            referral_count=0,
            join_date=SERVER_TIMESTAMP,
        )
        user.set_password(password)

        try:
            self.store.create(user)
        except IntegrityError as e:
            if self._email_taken(email):
                raise ValidationError("This email is already registered.") from e
            logger.error(f"Referral code {referral_code} collided while creating {user_id}")
            raise ReferralCodeCollisionError(
                "We could not assign you a referral code. Please try registering again."
            ) from e

        logger.info(f"Registered user {user_id} ({email}) with referral code {referral_code}")

        try:
            self.referrals.register_referral(user_id, full_name, referred_by_code)
        except LedgerError as e:
            # the account already exists; the lost link is left for support to repair
            logger.error(
                f"Referral link for {user_id} with code {referred_by_code!r} failed: {e}"
            )

        return self.store.get(User, user_id)

    def authenticate(self, email: str, password: str) -> UserSession:
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Email and password are required.")

        matches = self.store.query(User, email=email)
        user = matches[0] if matches else None
        if user is None or not user.check_password(password):
            logger.info(f"Failed sign-in for {email}")
            raise AuthenticationError("Invalid email or password.")

        logger.info(f"User {user.user_id} signed in")
        return UserSession(user.user_id)

    def get_profile(self, session: UserSession) -> dict:
        user_id = session.require_user()
        user = self.store.get(User, user_id)
        if user is None:
            raise UserNotFoundError()

        profile = user.to_dict()
        profile["displayName"] = user.full_name or user.email or "Investment User"
        profile["shortId"] = f"ID: {user_id[:6]}..."
        return profile
