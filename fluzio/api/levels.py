"""
Business Level API.

- Level summary and XP grants
- Upgrade requests from businesses
- Admin approval/rejection queue

Missing accounts, conflicts and storage failures are handled by the
application error handlers (404 / 409 / 503).
"""
from flask import Blueprint, request, jsonify

from ..services.level_service import LevelService
from ..utils.errors import bad_request, ErrorCode


levels_bp = Blueprint('levels', __name__, url_prefix='/api/levels')


def get_admin_id():
    """Admin id for audit attribution."""
    return request.headers.get('X-Admin-Id')


def _result_response(result):
    return jsonify(result.to_dict()), 200 if result.success else 400


@levels_bp.route('/upgrade-requests', methods=['GET'])
def list_upgrade_requests():
    """Pending upgrade requests, oldest first."""
    if not get_admin_id():
        return bad_request('X-Admin-Id header is required', ErrorCode.AUTH_REQUIRED)

    requests = LevelService().pending_upgrade_requests()
    return jsonify({'requests': requests, 'total': len(requests)})


@levels_bp.route('/<account_id>', methods=['GET'])
def get_level(account_id):
    return jsonify(LevelService().get_level_summary(account_id))


@levels_bp.route('/<account_id>/xp', methods=['POST'])
def grant_xp(account_id):
    """
    Grant XP to a business.

    Request body (one of delta / activity):
    {
        "delta": 40,
        "activity": "MEETUP_HOSTED",
        "reason": "Hosted coffee meetup"  # optional
    }
    """
    data = request.get_json(silent=True) or {}
    service = LevelService()
    actor = get_admin_id() or 'system'

    if data.get('activity'):
        result = service.grant_activity_xp(account_id, data['activity'], actor=actor)
    elif 'delta' in data:
        result = service.grant_xp(account_id, data['delta'], reason=data.get('reason'), actor=actor)
    else:
        return bad_request('delta or activity is required', ErrorCode.MISSING_FIELD)

    return jsonify(result)


@levels_bp.route('/<account_id>/upgrade-request', methods=['POST'])
def request_upgrade(account_id):
    return _result_response(LevelService().request_upgrade(account_id))


@levels_bp.route('/<account_id>/approve', methods=['POST'])
def approve_upgrade(account_id):
    admin_id = get_admin_id()
    if not admin_id:
        return bad_request('X-Admin-Id header is required', ErrorCode.AUTH_REQUIRED)

    return _result_response(LevelService().approve_upgrade(account_id, admin_id))


@levels_bp.route('/<account_id>/reject', methods=['POST'])
def reject_upgrade(account_id):
    """
    Reject a pending upgrade request.

    Request body:
    {
        "reason": "Needs more completed missions"  # optional
    }
    """
    admin_id = get_admin_id()
    if not admin_id:
        return bad_request('X-Admin-Id header is required', ErrorCode.AUTH_REQUIRED)

    data = request.get_json(silent=True) or {}
    return _result_response(LevelService().reject_upgrade(account_id, admin_id, data.get('reason')))
