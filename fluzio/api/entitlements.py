"""
Entitlements API.

Read-only lookups into the level x tier matrix. Out-of-domain level/tier
values come back as 400 INVALID_LEVEL_TIER.
"""
from flask import Blueprint, request, jsonify

from ..services.entitlement_service import EntitlementService
from ..utils.errors import bad_request, ErrorCode


entitlements_bp = Blueprint('entitlements', __name__, url_prefix='/api/entitlements')


def _level_arg():
    return request.args.get('level', type=int)


@entitlements_bp.route('', methods=['GET'])
def resolve_cell():
    """GET /api/entitlements?level=3&tier=GOLD&billing=ANNUAL"""
    level = _level_arg()
    tier = request.args.get('tier')
    if level is None or not tier:
        return bad_request('level and tier are required', ErrorCode.MISSING_FIELD)

    billing = request.args.get('billing', 'MONTHLY').upper()
    return jsonify(EntitlementService().for_cell(level, tier.upper(), billing))


@entitlements_bp.route('/accounts/<account_id>', methods=['GET'])
def account_entitlements(account_id):
    return jsonify(EntitlementService().for_account(account_id))


@entitlements_bp.route('/growth-credit-packs', methods=['GET'])
def growth_credit_packs():
    level = _level_arg()
    if level is None:
        return bad_request('level is required', ErrorCode.MISSING_FIELD)

    packs = EntitlementService().growth_credit_packs(level)
    return jsonify({'level': level, 'packs': packs})
