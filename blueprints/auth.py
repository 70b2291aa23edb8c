from flask import Blueprint, jsonify, session, current_app
from flask_login import login_user, logout_user
import logging

from models import User
from extensions import db
from ledger.accounts import AccountService
from ledger.errors import LedgerError
from blueprints.api_helpers import error_response, read_json


logger = logging.getLogger(__name__)
#==================================================================================================================

bp = Blueprint("auth", __name__, url_prefix="")

accounts = AccountService()


#===========================================================================
#      SIGN UP ROUTE.
#==============================================================================
@bp.route("/api/signup", methods=["POST"])
def signup():
    """
    Create a new account and link it to its referrer, if any.
    Expected JSON:
    {
        "fullName": "", "email": "", "password": "",
        "contact": "", "district": "", "referralCode": ""
    }
    """
    data = read_json()
    if data is None:
        return jsonify({"error": "Invalid or missing JSON body"}), 400

    try:
        user = accounts.register(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("fullName", ""),
            contact=data.get("contact", ""),
            district=data.get("district", ""),
            referred_by_code=data.get("referralCode", ""),
        )
    except LedgerError as e:
        return error_response(e)

    session["user_id"] = user.user_id
    login_user(user)
    current_app.logger.info(f"Signup complete for {user.user_id}")

    return jsonify({
        "status": "success",
        "message": "Registration successful! Welcome to Conomy Investments.",
        "user": user.to_dict()
    }), 201


 # --------------------------------------------------
 #      Login Route
 # --------------------------------------------------
@bp.route("/api/login", methods=["POST"])
def login():
    """
    Authenticate a user.
    Expected JSON:
    {
        "email": "",
        "password": ""
    }
    """
    data = read_json()
    if data is None:
        return jsonify({"error": "Invalid or missing JSON body"}), 400

    try:
        user_session = accounts.authenticate(data.get("email", ""), data.get("password", ""))
    except LedgerError as e:
        return error_response(e)

    user = db.session.get(User, user_session.user_id)
    session["user_id"] = user.user_id
    login_user(user)

    return jsonify({
        "message": "Login successful!",
        "user": user.to_dict()
    }), 200

#-----------------------------------------------------------------------------------------------------
@bp.route("/api/logout", methods=["POST"])
def logout():
    """
    Destroy User session
    """
    logout_user()
    session.clear()
    logger.info("User signed out successfully.")
    return jsonify({"message": "Logged out successfully"}), 200

# --------------------------------------------------
# Check Session (for frontend auto-login)
# --------------------------------------------------
@bp.route("/session", methods=["GET"])
def check_session():
    """Returns current logged-in user data if authenticated"""
    user_id = session.get("user_id")
    if not user_id:
        return jsonify({"authenticated": False}), 200

    user = db.session.get(User, user_id)
    if not user:
        session.clear()
        return jsonify({"authenticated": False}), 200

    return jsonify({
        "authenticated": True,
        "user": user.to_dict()
    }), 200
