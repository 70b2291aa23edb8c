# ==========================================================================================================
# -------------- Configuration file for Conomy Flask application -------------------------------------------
# ==========================================================================================================
import os
from dotenv import load_dotenv


if os.environ.get("FLASK_ENV") != "production":
    load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _database_uri(default):
    url = os.getenv("DATABASE_URL") or default
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+pg8000://", 1)
    return url


class Config:

    FLASK_ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "t")

    SECRET_KEY = os.getenv("SECRET_KEY")
    if not SECRET_KEY:
        if FLASK_ENV == "production":
            raise ValueError("SECRET_KEY must be set in production")
        SECRET_KEY = "dev_key_change_me"

    SQLALCHEMY_DATABASE_URI = _database_uri(
        f"sqlite:///{os.path.join(basedir, 'instance', 'conomy.db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # ------------------------------------------------------------------
    # Ledger rules
    # ------------------------------------------------------------------
    CURRENCY = "UGX"
    MIN_DEPOSIT = int(os.getenv("MIN_DEPOSIT", "1000"))
    MIN_WITHDRAWAL = int(os.getenv("MIN_WITHDRAWAL", "10000"))
    # largest single amount; keeps every money column inside 32-bit INTEGER
    MAX_AMOUNT = int(os.getenv("MAX_AMOUNT", "1000000000"))
    DEPOSIT_METHOD = "MTN Mobile Money"
    WITHDRAWAL_METHOD = "MTN Mobile Money"
    TRANSACTION_MAX_ATTEMPTS = int(os.getenv("TRANSACTION_MAX_ATTEMPTS", "5"))

    MAX_PAGE_SIZE = 100

    MIN_PASSWORD_LENGTH = 6


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SECRET_KEY = "testing"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
