from flask import Blueprint, jsonify
import logging

from ledger.errors import LedgerError
from ledger.ledger_service import LedgerService
from ledger.products import ProductCatalog
from blueprints.api_helpers import current_user_session, error_response


bp = Blueprint("products", __name__, url_prefix="")
logger = logging.getLogger(__name__)

catalog = ProductCatalog()
ledger_service = LedgerService()


#==========================================================================
# PRODUCTS PAGE
#==========================================================================
@bp.route("/api/products", methods=["GET"])
def list_products():
    try:
        products = catalog.list_products()
    except LedgerError as e:
        return error_response(e)
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@bp.route("/api/products/<product_id>/invest", methods=["POST"])
def invest(product_id):
    """Buy a product with the account balance"""
    user_session = current_user_session()
    if not user_session.is_signed_in:
        return jsonify({"error": "Please log in to invest."}), 401

    try:
        new_balance = ledger_service.invest_in_product(user_session, product_id)
    except LedgerError as e:
        return error_response(e)

    return jsonify({
        "message": "Investment successful",
        "productId": product_id,
        "balance": new_balance
    }), 201


#==========================================================================
# MY PRODUCTS PAGE
#==========================================================================
@bp.route("/api/my-products", methods=["GET"])
def my_products():
    try:
        investments = catalog.list_my_investments(current_user_session())
    except LedgerError as e:
        return error_response(e)
    return jsonify({"investments": investments, "empty": not investments}), 200
