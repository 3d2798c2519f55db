"""
Configuration routes blueprint.
"""
from flask import Blueprint, jsonify, current_app
from generators.catalog import catalog_dict
from utils.config_utils import public_config

# Create blueprint
config_bp = Blueprint('config', __name__)


@config_bp.route('/api/config', methods=['GET'])
def get_config():
    """Get the non-secret configuration, template catalog and models in use"""
    config = current_app.config['CONFIG']
    return jsonify({
        "config": public_config(config),
        "templates": catalog_dict(),
        "models": {
            "chat": config['chat_model'],
            "template": config['template_model'],
            "title": config['title_model'],
            "openrouter": list(config['openrouter_models']),
        },
    })
