"""
Chat history routes blueprint.
"""
from flask import Blueprint, jsonify, request, current_app, g
from services.thread_service import (
    list_threads,
    get_thread,
    create_thread,
    add_message,
    update_title,
    remove_thread,
    mark_context_window_exceeded,
)
from services.user_service import get_or_create_username
from utils.auth_utils import login_required

# Create blueprint
thread_bp = Blueprint('thread', __name__)


def _username(config):
    return get_or_create_username(g.user['id'], config)


@thread_bp.route('/api/threads', methods=['GET'])
@login_required
def get_threads():
    config = current_app.config['CONFIG']
    return jsonify(list_threads(_username(config), config))


@thread_bp.route('/api/threads', methods=['POST'])
@login_required
def new_thread():
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    thread_id = create_thread(_username(config), data.get('title'), config)
    return jsonify({"id": thread_id}), 201


@thread_bp.route('/api/threads/<int:thread_id>', methods=['GET'])
@login_required
def thread_details(thread_id):
    """Get a thread with its messages"""
    config = current_app.config['CONFIG']
    thread = get_thread(thread_id, _username(config), config)
    if thread is None:
        return jsonify({"error": "Thread not found"}), 404
    return jsonify(thread)


@thread_bp.route('/api/threads/<int:thread_id>/messages', methods=['POST'])
@login_required
def post_message(thread_id):
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    message_id = add_message(
        thread_id,
        _username(config),
        data.get('role'),
        data.get('content'),
        config,
        tool_calls=data.get('tool_calls'),
    )
    return jsonify({"id": message_id}), 201


@thread_bp.route('/api/threads/<int:thread_id>', methods=['PATCH'])
@login_required
def edit_thread(thread_id):
    """Rename a thread or flag that it outgrew the model context window"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    username = _username(config)
    if 'title' in data:
        update_title(thread_id, username, data['title'], config)
    if 'context_window_exceeded' in data:
        mark_context_window_exceeded(thread_id, username, data['context_window_exceeded'], config)
    return jsonify({"success": True})


@thread_bp.route('/api/threads/<int:thread_id>', methods=['DELETE'])
@login_required
def delete_thread(thread_id):
    config = current_app.config['CONFIG']
    remove_thread(thread_id, _username(config), config)
    return jsonify({"success": True})
