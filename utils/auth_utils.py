"""
Request authentication helpers for route handlers.
"""
from functools import wraps

from flask import current_app, g, jsonify, request


def get_bearer_token():
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip()
    return None


def login_required(view):
    """Require a session token; the user is exposed as g.user."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        from services.user_service import get_user_by_token

        config = current_app.config['CONFIG']
        user = get_user_by_token(get_bearer_token(), config)
        if user is None:
            return jsonify({"error": "Not authenticated"}), 401
        g.user = user
        return view(*args, **kwargs)
    return wrapped


def extension_key_required(view):
    """Require a browser-extension API key (jk_...); exposes g.user_id and g.api_key."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        from services.extension_service import lookup_by_key

        config = current_app.config['CONFIG']
        token = get_bearer_token()
        api_key = lookup_by_key(token, config) if token and token.startswith('jk_') else None
        if api_key is None:
            return jsonify({"error": "Invalid or revoked API key"}), 401
        g.user_id = api_key['user_id']
        g.api_key = api_key
        return view(*args, **kwargs)
    return wrapped
