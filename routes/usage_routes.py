"""
Plan usage, subscription and referral routes blueprint.
"""
from flask import Blueprint, jsonify, request, current_app, g
from services.errors import ValidationError
from services.subscription_service import create_referral, get_referrals_by_referrer, get_user_subscription
from services.usage_service import can_add_job, can_generate_document, get_usage_summary
from utils.auth_utils import login_required

# Create blueprint
usage_bp = Blueprint('usage', __name__)


@usage_bp.route('/api/usage')
@login_required
def get_usage():
    """Usage, limits and what the user can still do this month"""
    config = current_app.config['CONFIG']
    user_id = g.user['id']
    summary = get_usage_summary(user_id, config)
    summary['can_generate_document'] = can_generate_document(user_id, config)
    summary['can_add_job'] = can_add_job(user_id, config)
    return jsonify(summary)


@usage_bp.route('/api/subscription')
@login_required
def get_subscription():
    config = current_app.config['CONFIG']
    return jsonify({"subscription": get_user_subscription(g.user['id'], config)})


@usage_bp.route('/api/referrals', methods=['GET'])
@login_required
def get_referrals():
    config = current_app.config['CONFIG']
    return jsonify(get_referrals_by_referrer(g.user['id'], config))


@usage_bp.route('/api/referrals', methods=['POST'])
@login_required
def refer_friend():
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    try:
        referral_id = create_referral(g.user['id'], data.get('email'), config)
        return jsonify({"id": referral_id}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
