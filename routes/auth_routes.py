"""
Authentication and profile routes blueprint.
"""
from flask import Blueprint, jsonify, request, current_app, g
from services.errors import ValidationError
from services.user_service import (
    create_user,
    authenticate,
    create_session,
    delete_session,
    get_resume_preferences,
    set_resume_preferences,
)
from utils.auth_utils import get_bearer_token, login_required

# Create blueprint
auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/api/auth/signup', methods=['POST'])
def signup():
    """Register a user and start a session"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    try:
        user = create_user(data.get('name'), data.get('email'), data.get('password'), config,
                           username=data.get('username'))
        token = create_session(user['id'], config)
        return jsonify({"user": user, "token": token}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@auth_bp.route('/api/auth/signin', methods=['POST'])
def signin():
    """Sign in with email and password"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    user = authenticate(data.get('email'), data.get('password'), config)
    if user is None:
        return jsonify({"error": "Invalid email or password"}), 401
    token = create_session(user['id'], config)
    return jsonify({"user": user, "token": token})


@auth_bp.route('/api/auth/signout', methods=['POST'])
@login_required
def signout():
    config = current_app.config['CONFIG']
    delete_session(get_bearer_token(), config)
    return jsonify({"success": True})


@auth_bp.route('/api/auth/me')
@login_required
def me():
    return jsonify(g.user)


@auth_bp.route('/api/auth/me/resume-preferences', methods=['GET', 'PUT'])
@login_required
def resume_preferences():
    """Get or replace the preferences applied to every generated resume"""
    config = current_app.config['CONFIG']
    try:
        if request.method == 'PUT':
            data = request.get_json(silent=True) or {}
            preferences = set_resume_preferences(g.user['id'], data.get('preferences'), config)
        else:
            preferences = get_resume_preferences(g.user['id'], config)
        return jsonify({"preferences": preferences})
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return jsonify({"error": str(e)}), 500
