import hmac
from functools import wraps
from flask import abort, current_app, request

ADMIN_TOKEN_HEADER = "X-Admin-Token"


def admin_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        expected = current_app.config.get("ADMIN_TOKEN")
        if not expected:
            # admin API is disabled until a token is configured
            abort(403)
        given = request.headers.get(ADMIN_TOKEN_HEADER) or ""
        if not hmac.compare_digest(given.encode(), expected.encode()):
            abort(403)
        return view(*args, **kwargs)
    return wrapped
