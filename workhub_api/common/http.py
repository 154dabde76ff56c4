# workhub_api/common/http.py
from flask import jsonify

def ok(data=None, status=200, **extra):
    payload = {"success": True, "data": data}
    if extra:
        payload.update(extra)
    return jsonify(payload), status

def fail(message="Bad Request", status=400, code=None, details=None):
    payload = {"success": False, "error": message}
    if code: payload["code"] = code
    if details is not None: payload["details"] = details
    return jsonify(payload), status
