from flask import jsonify, request
from flask_login import current_user, login_required

from . import bp
from auth.guards import admin_required
from models import User
from queries import build_pagination, paginate
from responses import pagination_response, success_response
from stats import recent_activity, user_stats


def stats_payload(user_id):
    data = user_stats(user_id)
    data['recentActivity'] = recent_activity(user_id)
    return data


@bp.route('/stats', methods=['GET'])
@login_required
def my_stats():
    return jsonify(success_response(stats_payload(current_user.id)))


@bp.route('/<id:user_id>/stats', methods=['GET'])
def public_stats(user_id):
    return jsonify(success_response(stats_payload(user_id)))


@bp.route('', methods=['GET'])
@login_required
@admin_required
def list_users():
    pagination = build_pagination(request.args.get('page'), request.args.get('limit'))
    query = User.query.order_by(User.created_at.desc(), User.id.desc())
    users, total = paginate(query, pagination)
    items = [dict(u.to_dict(), isAdmin=u.is_admin) for u in users]
    return jsonify(success_response(pagination_response(items, total, pagination.page, pagination.limit)))
