# workhub_api/services/notifications.py
"""In-app notification rows; written in the caller's transaction (no commit here)."""
import logging
from datetime import datetime

from workhub_api.extensions import db
from workhub_api.models.employee import Employee
from workhub_api.models.notification import Notification

log = logging.getLogger(__name__)


def notify(recipient_id, recipient_type, title, message, type_, reference_id=None):
    if not recipient_id:
        return None
    n = Notification(
        recipient_id=recipient_id,
        recipient_type=recipient_type,
        title=title,
        message=message,
        type=type_,
        reference_id=reference_id,
    )
    db.session.add(n)
    log.debug("Queued notification %s for %s #%s", type_, recipient_type, recipient_id)
    return n


def notify_many(recipient_ids, recipient_type, title, message, type_, reference_id=None):
    seen = set()
    for rid in recipient_ids or []:
        if rid and rid not in seen:
            seen.add(rid)
            notify(rid, recipient_type, title, message, type_, reference_id)
    return len(seen)


def manager_ids():
    rows = (db.session.query(Employee.id)
            .filter(Employee.user_type == "manager", Employee.is_active.is_(True))
            .all())
    return [r[0] for r in rows]


def notify_managers(manager_id, title, message, type_, reference_id=None):
    """The assigned manager if any; otherwise every active manager."""
    ids = [manager_id] if manager_id else manager_ids()
    return notify_many(ids, "manager", title, message, type_, reference_id)


def with_comment(message: str, comment) -> str:
    c = (comment or "").strip()
    return f"{message} Comments: {c}" if c else message


def mark_read(recipient_id, ids=None, mark_all=False) -> int:
    q = Notification.query.filter(Notification.recipient_id == recipient_id,
                                  Notification.is_read.is_(False))
    if not mark_all:
        if not ids:
            return 0
        q = q.filter(Notification.id.in_(ids))
    now = datetime.utcnow()
    count = 0
    for n in q.all():
        n.is_read = True
        n.read_at = now
        count += 1
    db.session.commit()
    return count
