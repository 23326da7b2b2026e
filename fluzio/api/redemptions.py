"""
Redemption Eligibility API.

Responses carry qualitative messages only.
"""
from flask import Blueprint, request, jsonify

from ..services.redemption_service import RedemptionEligibilityService
from ..utils.errors import bad_request, ErrorCode


redemptions_bp = Blueprint('redemptions', __name__, url_prefix='/api/redemptions')


@redemptions_bp.route('/eligibility', methods=['POST'])
def check_eligibility():
    """
    Check whether a customer can redeem a reward.

    Request body:
    {
        "user_id": "u_123",
        "reward_id": "r_456",
        "business_id": "b_789"
    }
    """
    data = request.get_json(silent=True) or {}
    missing = [field for field in ('user_id', 'reward_id', 'business_id') if not data.get(field)]
    if missing:
        return bad_request(f'Missing required fields: {", ".join(missing)}', ErrorCode.MISSING_FIELD)

    decision = RedemptionEligibilityService().check(
        data['user_id'], data['reward_id'], data['business_id']
    )
    return jsonify(decision.to_dict())


@redemptions_bp.route('/status/<user_id>', methods=['GET'])
def redemption_status(user_id):
    return jsonify(RedemptionEligibilityService().redemption_status(user_id))
