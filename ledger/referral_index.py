"""
Referral Index: who referred whom, and each referrer's team.

Codes are the first six characters of the account identifier, upper-cased.
Nothing resolves two accounts whose identifiers share a prefix; the unique
index on ``users.referral_code`` turns that into an error at registration.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from models import User, TeamMember
from ledger.errors import UserNotFoundError
from ledger.store import DocumentStore, Transaction, SERVER_TIMESTAMP


logger = logging.getLogger(__name__)

REFERRAL_CODE_LENGTH = 6


def derive_referral_code(user_id: str) -> str:
    return user_id[:REFERRAL_CODE_LENGTH].upper()


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class ReferralIndex:
    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or DocumentStore()

    def find_referrer(self, referral_code: str) -> Optional[User]:
        code = normalize_code(referral_code)
        if not code:
            return None
        matches = self.store.query(User, referral_code=code)
        if len(matches) > 1:
            logger.warning(f"Referral code {code} matches {len(matches)} accounts; using the first")
        return matches[0] if matches else None

    def register_referral(self, new_user_id: str, new_user_full_name: str,
                          referred_by_code: Optional[str]) -> Optional[str]:
        """
        Link a freshly created account to its referrer.
        Returns the referrer's user_id, or None when the code is empty,
        unknown, the account's own, or already linked.
        """
        code = normalize_code(referred_by_code)
        if not code:
            return None

        referrer = self.find_referrer(code)
        if referrer is None:
            logger.info(f"No referrer for code {code}; user {new_user_id} registered without a referral")
            return None

        referrer_id = referrer.user_id
        if referrer_id == new_user_id:
            logger.info(f"User {new_user_id} tried to use their own referral code")
            return None

        def link_team_member(tx: Transaction):
            if not tx.increment(User, referrer_id, "referral_count", 1):
                raise UserNotFoundError(f"Referrer {referrer_id} no longer exists")
            tx.update(User, new_user_id, referred_by=code)
            tx.create(TeamMember(
                owner_id=referrer_id,
                member_id=new_user_id,
                full_name=new_user_full_name,
                join_date=SERVER_TIMESTAMP,
            ))
            return referrer_id

        try:
            self.store.run_transaction(link_team_member)
        except IntegrityError:
            logger.warning(f"User {new_user_id} is already on the team of {referrer_id}; referral not counted again")
            return None
        logger.info(f"User {new_user_id} joined the team of {referrer_id} via code {code}")
        return referrer_id

    def list_team(self, user_id: str) -> List[TeamMember]:
        """Team members in whatever order the store returns them"""
        return self.store.query(TeamMember, owner_id=user_id)
