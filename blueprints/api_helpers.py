# api_helpers.py
from flask import jsonify, request, session, current_app

from ledger.errors import LedgerError, StoreUnavailableError
from ledger.session import UserSession


def current_user_session() -> UserSession:
    """UserSession for whoever owns this request's cookie session"""
    return UserSession(session.get("user_id"))


def error_response(error: LedgerError):
    if isinstance(error, StoreUnavailableError):
        current_app.logger.error(f"Store unavailable: {error}")
    return jsonify({"error": error.message}), error.status_code


def read_json():
    """Request body as a dict; None if it is missing or not JSON"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None
