"""
Browser extension routes blueprint.
"""
import logging

from flask import Blueprint, jsonify, request, current_app, g
from services.errors import LimitReachedError, ValidationError
from services.extension_service import (
    generate_api_key,
    get_api_key,
    revoke_api_key,
    save_job_from_page,
)
from utils.auth_utils import extension_key_required, login_required

logger = logging.getLogger(__name__)

# Create blueprint
extension_bp = Blueprint('extension', __name__)


@extension_bp.route('/api/extension/key', methods=['POST'])
@login_required
def create_key():
    """Issue a new extension key; the full key is only returned here"""
    config = current_app.config['CONFIG']
    return jsonify({"key": generate_api_key(g.user['id'], config)}), 201


@extension_bp.route('/api/extension/key', methods=['GET'])
@login_required
def get_key():
    config = current_app.config['CONFIG']
    return jsonify(get_api_key(g.user['id'], config) or {"key": None})


@extension_bp.route('/api/extension/key', methods=['DELETE'])
@login_required
def revoke_key():
    config = current_app.config['CONFIG']
    return jsonify(revoke_api_key(g.user['id'], config))


@extension_bp.route('/api/extension/save-job', methods=['POST'])
@extension_key_required
def save_job():
    """Save the job listing the user is viewing to their tracker"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    page_text = data.get('page_text')
    if not isinstance(page_text, str) or not page_text.strip():
        return jsonify({"error": "page_text is required"}), 400

    try:
        job = save_job_from_page(
            config,
            g.user_id,
            g.api_key['id'],
            page_text,
            data.get('page_url'),
            data.get('page_title'),
            status=data.get('status'),
        )
        return jsonify({"success": True, "job": job})
    except LimitReachedError as e:
        return jsonify({"error": str(e), "limitReached": True}), 403
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Extension save-job failed: {e}")
        return jsonify({"error": str(e)}), 500
