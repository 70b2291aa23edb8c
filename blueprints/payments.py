#======================================================================================================
#
#   DEPOSIT / WITHDRAWAL REQUESTS AND BALANCE
#
#===========================================================================================================
from flask import Blueprint, jsonify, current_app
import logging

from ledger.errors import LedgerError
from ledger.ledger_service import LedgerService, BALANCE_UNAVAILABLE
from blueprints.api_helpers import current_user_session, error_response, read_json
from utils import format_ugx


bp = Blueprint("payments", __name__)
logger = logging.getLogger(__name__)

ledger_service = LedgerService()


#=============================================================================================
#      BALANCE
#============================================================================================
@bp.route("/api/balance", methods=["GET"])
def get_balance():
    try:
        balance = ledger_service.get_balance(current_user_session())
    except LedgerError as e:
        return error_response(e)

    if balance is BALANCE_UNAVAILABLE:
        return jsonify({"balance": None, "available": False}), 200
    return jsonify({
        "balance": balance,
        "available": True,
        "currency": current_app.config.get("CURRENCY", "UGX")
    }), 200


#=============================================================================================
#      RECHARGE (DEPOSIT REQUEST)
#============================================================================================
@bp.route("/api/recharge", methods=["POST"])
def request_recharge():
    """
    Expected JSON: {"amount": 5000, "momoNumber": "0772123456"}
    """
    data = read_json()
    if data is None:
        return jsonify({"error": "Invalid JSON"}), 400

    try:
        recharge = ledger_service.request_deposit(
            current_user_session(),
            data.get("amount"),
            data.get("momoNumber", ""),
        )
    except LedgerError as e:
        return error_response(e)

    return jsonify({
        "message": f"Deposit request of {format_ugx(recharge.amount)} submitted successfully!",
        "recharge": recharge.to_dict()
    }), 201


#=============================================================================================
#      WITHDRAWAL REQUEST
#============================================================================================
@bp.route("/api/withdraw", methods=["POST"])
def request_withdrawal():
    """
    Expected JSON: {"amount": 20000, "payoutNumber": "0772123456"}
    """
    data = read_json()
    if data is None:
        return jsonify({"error": "Invalid JSON"}), 400

    try:
        withdrawal = ledger_service.request_withdrawal(
            current_user_session(),
            data.get("amount"),
            data.get("payoutNumber", ""),
        )
    except LedgerError as e:
        return error_response(e)

    logger.info(f"Withdrawal {withdrawal.id} submitted")
    return jsonify({
        "message": f"Withdrawal request of {format_ugx(withdrawal.amount)} submitted successfully!",
        "withdrawal": withdrawal.to_dict()
    }), 201
