from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required

from workhub_api.extensions import db
from workhub_api.common.http import ok, fail
from workhub_api.common.auth import current_employee, current_user
from workhub_api.models.notification import Notification, PushSubscription
from workhub_api.services import notifications as notes

bp = Blueprint("notifications", __name__, url_prefix="/api")


def _row(n: Notification):
    return {
        "id": n.id,
        "recipient_type": n.recipient_type,
        "recipient_id": n.recipient_id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "reference_id": n.reference_id,
        "is_read": n.is_read,
        "read_at": n.read_at.isoformat() if n.read_at else None,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@bp.get("/notifications")
@jwt_required()
def list_notifications():
    me = current_employee()
    if me is None:
        return ok([], unread_count=0)
    q = Notification.query.filter(Notification.recipient_id == me.id)
    if request.args.get("unread") == "true":
        q = q.filter(Notification.is_read.is_(False))
    limit = min(request.args.get("limit", type=int) or 50, 200)
    rows = q.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
    unread = (Notification.query
              .filter(Notification.recipient_id == me.id, Notification.is_read.is_(False))
              .count())
    return ok([_row(n) for n in rows], unread_count=unread)


@bp.post("/notifications/mark-read")
@jwt_required()
def mark_read():
    me = current_employee()
    if me is None:
        return fail("Employee not found", 404)
    d = request.get_json(silent=True) or {}
    ids = d.get("notificationIds") or d.get("ids")
    if d.get("notificationId"):
        ids = [d["notificationId"]]
    mark_all = bool(d.get("markAll") or d.get("all"))
    if not ids and not mark_all:
        return fail("notificationIds or markAll is required", 400)
    count = notes.mark_read(me.id, ids=ids, mark_all=mark_all)
    return ok({"updated": count})


def _save_subscription():
    d = request.get_json(silent=True) or {}
    sub = d.get("subscription") if isinstance(d.get("subscription"), dict) else d
    endpoint = (sub.get("endpoint") or "").strip()
    if not endpoint:
        return fail("Subscription endpoint is required", 400)
    keys = sub.get("keys") or {}

    me = current_employee()
    u = current_user()
    row = PushSubscription.query.filter_by(endpoint=endpoint).first()
    if row is None:
        row = PushSubscription(endpoint=endpoint)
        db.session.add(row)
    row.p256dh = keys.get("p256dh")
    row.auth = keys.get("auth")
    row.employee_id = me.id if me else row.employee_id
    row.user_type = u.user_type if u else d.get("userType")
    row.is_active = True
    db.session.commit()
    current_app.logger.info("Push subscription stored for employee %s", me.id if me else None)
    return ok({"id": row.id, "endpoint": row.endpoint})


@bp.post("/save-subscription")
@jwt_required()
def save_subscription():
    return _save_subscription()


@bp.post("/notifications/subscribe")
@jwt_required()
def subscribe():
    return _save_subscription()


@bp.post("/notifications/unsubscribe")
@jwt_required()
def unsubscribe():
    d = request.get_json(silent=True) or {}
    endpoint = (d.get("endpoint") or "").strip()
    if not endpoint:
        return fail("Subscription endpoint is required", 400)
    row = PushSubscription.query.filter_by(endpoint=endpoint).first()
    if row is None:
        return fail("Subscription not found", 404)
    row.is_active = False
    db.session.commit()
    return ok({"endpoint": endpoint, "is_active": False})
