# models.py - Canonical Flask-SQLAlchemy models
import enum
from sqlalchemy import Index, text
from extensions import db
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

# ===========================================================
# ENUM DEFINITIONS
# ===========================================================

class InvestmentStatus(enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PENDING = "pending"


class RequestStatus(enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


def _isoformat(value):
    return value.isoformat() if value else None

# ===========================================================
# USER MODELS
# ===========================================================

class User(UserMixin, db.Model):
    """Account document: one balance per user, keyed by the identity provider's uid."""
    __tablename__ = 'users'

    user_id = db.Column(db.String(64), primary_key=True)
    full_name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    contact = db.Column(db.String(32))
    district = db.Column(db.String(80))
    password_hash = db.Column(db.String(255), nullable=False)

    balance = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    # bumped by every balance write; a stale value means a concurrent transaction won
    balance_version = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    total_commission = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))
    is_admin = db.Column(db.Boolean, nullable=False, default=False)

    referral_code = db.Column(db.String(6), nullable=False)
    referred_by = db.Column(db.String(6), nullable=True)
    referral_count = db.Column(db.Integer, nullable=False, default=0, server_default=text("0"))

    join_date = db.Column(db.DateTime(timezone=True), server_default=db.func.now())

    team = db.relationship(
        'TeamMember',
        back_populates='owner',
        foreign_keys='TeamMember.owner_id',
        lazy='dynamic'
    )

    __table_args__ = (
        Index('idx_user_referral_code', 'referral_code', unique=True),
    )

    def get_id(self):
        return self.user_id

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "userId": self.user_id,
            "fullName": self.full_name,
            "email": self.email,
            "contact": self.contact,
            "district": self.district,
            "balance": self.balance,
            "totalCommission": self.total_commission,
            "isAdmin": self.is_admin,
            "referralCode": self.referral_code,
            "referredBy": self.referred_by,
            "referralCount": self.referral_count,
            "joinDate": _isoformat(self.join_date),
        }

    def __repr__(self):
        return f'<User {self.user_id} {self.email}>'


class TeamMember(db.Model):
    """A user who registered with the owner's referral code. Written once."""
    __tablename__ = 'team_members'

    owner_id = db.Column(db.String(64), db.ForeignKey('users.user_id', ondelete='CASCADE'), primary_key=True)
    member_id = db.Column(db.String(64), primary_key=True)
    full_name = db.Column(db.String(150))
    join_date = db.Column(db.DateTime(timezone=True), server_default=db.func.now())

    owner = db.relationship('User', back_populates='team', foreign_keys=[owner_id])

    def to_dict(self):
        return {
            "memberId": self.member_id,
            "fullName": self.full_name,
            "joinDate": _isoformat(self.join_date),
        }

# ===========================================================
# PRODUCTS & INVESTMENTS
# ===========================================================

class Product(db.Model):
    __tablename__ = 'products'

    product_id = db.Column(db.String(40), primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    price = db.Column(db.Integer, nullable=False)
    cycle_days = db.Column(db.Integer, nullable=False)
    daily_income = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, default=True)

    def to_dict(self):
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": self.price,
            "cycleDays": self.cycle_days,
            "dailyIncome": self.daily_income,
            "totalIncome": self.daily_income * self.cycle_days,
        }


class Investment(db.Model):
    __tablename__ = 'investments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.user_id'), nullable=False, index=True)
    product_id = db.Column(db.String(40), nullable=False)
    product_name = db.Column(db.String(100))
    investment_amount = db.Column(db.Integer, nullable=False)
    cycle_days = db.Column(db.Integer, nullable=False)
    daily_income = db.Column(db.Integer, nullable=False)
    total_income = db.Column(db.Integer, nullable=False)
    total_earned = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default=InvestmentStatus.ACTIVE.value)
    days_progress = db.Column(db.Integer, nullable=False, default=0)
    start_date = db.Column(db.DateTime(timezone=True), server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "productId": self.product_id,
            "productName": self.product_name,
            "investmentAmount": self.investment_amount,
            "cycleDays": self.cycle_days,
            "dailyIncome": self.daily_income,
            "totalIncome": self.total_income,
            "totalEarned": self.total_earned,
            "status": self.status,
            "daysProgress": self.days_progress,
            "startDate": _isoformat(self.start_date),
        }

# ===========================================================
# DEPOSITS & WITHDRAWALS
# ===========================================================

class RechargeRequest(db.Model):
    __tablename__ = 'recharges'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.user_id'), nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    method = db.Column(db.String(50))
    momo_number = db.Column(db.String(32))
    status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    request_date = db.Column(db.DateTime(timezone=True), server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "amount": self.amount,
            "method": self.method,
            "momoNumber": self.momo_number,
            "status": self.status,
            "requestDate": _isoformat(self.request_date),
        }


class WithdrawalRequest(db.Model):
    __tablename__ = 'withdrawals'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.user_id'), nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    method = db.Column(db.String(50))
    payout_number = db.Column(db.String(32))
    status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    request_date = db.Column(db.DateTime(timezone=True), server_default=db.func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "amount": self.amount,
            "method": self.method,
            "payoutNumber": self.payout_number,
            "status": self.status,
            "requestDate": _isoformat(self.request_date),
        }
