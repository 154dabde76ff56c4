from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError
from workhub_api.extensions import db
from workhub_api.services.clock import server_time_payload

bp = Blueprint("health", __name__, url_prefix="/api")

@bp.get("/health")
def health():
    try:
        db.session.execute(db.text("SELECT 1"))
        return jsonify({"status": "healthy", "database": "connected"}), 200
    except SQLAlchemyError as e:
        db.session.rollback()
        return jsonify({"status": "unhealthy", "database": str(e)}), 503

@bp.get("/server-time")
def server_time():
    return jsonify({"success": True, **server_time_payload()}), 200

@bp.get("/current-time")
def current_time():
    return jsonify({"success": True, **server_time_payload()}), 200
