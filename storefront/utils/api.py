# --- storefront/utils/api.py ---
from flask import jsonify


def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        "data": data,
    }


def api_error(message, error=None):
    body = {
        "status": False,
        "message": message,
    }
    if error is not None:
        body["error"] = error
    return body


# unified response helpers
def ok(message, data=None, status=200):
    r = jsonify(api_ok(message, data)); r.status_code = status; return r
