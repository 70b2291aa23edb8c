from flask import Blueprint, request, jsonify, current_app

from ledger.activity_aggregator import ActivityAggregator
from ledger.errors import LedgerError
from blueprints.api_helpers import current_user_session, error_response

activity_bp = Blueprint('activity', __name__)

aggregator = ActivityAggregator()


@activity_bp.route('/api/activity', methods=['GET'])
def get_user_activity():
    """
    Deposits, withdrawals and investments of the signed-in user, newest first.
    Optional ?limit=N trims the list after sorting.
    """
    user_session = current_user_session()
    if not user_session.is_signed_in:
        return jsonify({'error': 'Unauthorized'}), 401

    limit = request.args.get('limit', type=int)
    max_page_size = current_app.config.get('MAX_PAGE_SIZE', 100)
    if limit is not None and (limit < 1 or limit > max_page_size):
        return jsonify({'error': f'Limit must be between 1 and {max_page_size}'}), 400

    try:
        activities = [entry.to_dict() for entry in aggregator.get_activity(user_session.user_id)]
    except LedgerError as e:
        return error_response(e)

    if limit is not None:
        activities = activities[:limit]

    return jsonify({
        'activities': activities,
        'count': len(activities),
        'currency': current_app.config.get('CURRENCY', 'UGX')
    }), 200
