from flask import Blueprint, jsonify
from flask_login import login_required, current_user

from ledger.accounts import AccountService
from ledger.errors import LedgerError
from ledger.referral_index import ReferralIndex
from ledger.session import UserSession
from blueprints.api_helpers import error_response


bp = Blueprint('profile', __name__, url_prefix="")

accounts = AccountService()
referrals = ReferralIndex()

# ----------------------------------------------------------------------------------
# ME SECTION: profile data for the signed-in user
# ----------------------------------------------------------------------------------
@bp.route("/user/profile", methods=["GET"])
@login_required
def get_user_profile():
    try:
        return jsonify(accounts.get_profile(UserSession(current_user.user_id))), 200
    except LedgerError as e:
        return error_response(e)


#=======================================================================================
#      MY TEAM
#=======================================================================================
@bp.route("/api/team", methods=["GET"])
@login_required
def get_my_team():
    """
    Members who registered with the current user's referral code,
    numbered in the order the store returned them.
    """
    try:
        members = referrals.list_team(current_user.user_id)
    except LedgerError as e:
        return error_response(e)

    team = []
    for position, member in enumerate(members, start=1):
        entry = member.to_dict()
        entry["position"] = position
        team.append(entry)

    return jsonify({"count": len(team), "members": team}), 200
