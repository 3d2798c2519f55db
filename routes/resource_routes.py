"""
Resource library routes blueprint.

Domain errors raised by the service (ValidationError, NotFoundError,
NotAuthorizedError) are turned into responses by the app error handler.
"""
from flask import Blueprint, jsonify, request, current_app, g
from services.resource_service import (
    list_resources,
    get_resource,
    add_resource,
    update_resource,
    delete_resource,
)
from utils.auth_utils import login_required

# Create blueprint
resource_bp = Blueprint('resource', __name__)


@resource_bp.route('/api/resources', methods=['GET'])
@login_required
def get_resources():
    config = current_app.config['CONFIG']
    return jsonify(list_resources(g.user['id'], config))


@resource_bp.route('/api/resources', methods=['POST'])
@login_required
def create_resource():
    """Save a link to the library"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    return jsonify(add_resource(g.user['id'], data, config)), 201


@resource_bp.route('/api/resources/<int:resource_id>', methods=['GET'])
@login_required
def resource_details(resource_id):
    config = current_app.config['CONFIG']
    resource = get_resource(resource_id, g.user['id'], config)
    if resource is None:
        return jsonify({"error": "Resource not found"}), 404
    return jsonify(resource)


@resource_bp.route('/api/resources/<int:resource_id>', methods=['PUT'])
@login_required
def edit_resource(resource_id):
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    return jsonify(update_resource(resource_id, g.user['id'], data, config))


@resource_bp.route('/api/resources/<int:resource_id>', methods=['DELETE'])
@login_required
def remove_resource(resource_id):
    config = current_app.config['CONFIG']
    delete_resource(resource_id, g.user['id'], config)
    return jsonify({"success": True})
