# Overview: Standard JSON envelopes returned by every route.

from flask import jsonify

from .time_utils import to_utc_z, utcnow


def success_response(data=None, message: str = "Success", status: int = 200):
    return jsonify({
        "success": True,
        "message": message,
        "data": data,
        "timestamp": to_utc_z(utcnow()),
    }), status


def error_response(message: str, status: int = 400, errors=None, **extra):
    body = {
        "success": False,
        "message": message,
        "errors": errors,
        "timestamp": to_utc_z(utcnow()),
    }
    body.update(extra)
    return jsonify(body), status


def api_error_response(exc):
    """Render an errors.ApiError into the envelope."""
    return error_response(exc.message, exc.status_code, exc.errors, **exc.payload())
