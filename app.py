import logging

from flask import Flask, jsonify
from flask_cors import CORS

from utils.config_utils import load_config
from services.db_schema_service import verify_db_schema
from services.errors import JobKompassError, LimitReachedError

from routes.auth_routes import auth_bp
from routes.chat_routes import chat_bp
from routes.config_routes import config_bp
from routes.contact_routes import contact_bp
from routes.document_routes import document_bp
from routes.export_routes import export_bp
from routes.extension_routes import extension_bp
from routes.free_resume_routes import free_resume_bp
from routes.job_routes import job_bp
from routes.performance_routes import performance_bp
from routes.resource_routes import resource_bp
from routes.stripe_routes import stripe_bp
from routes.template_routes import template_bp
from routes.thread_routes import thread_bp
from routes.usage_routes import usage_bp

BLUEPRINTS = (
    auth_bp,
    chat_bp,
    config_bp,
    contact_bp,
    document_bp,
    export_bp,
    extension_bp,
    free_resume_bp,
    job_bp,
    performance_bp,
    resource_bp,
    stripe_bp,
    template_bp,
    thread_bp,
    usage_bp,
)


def handle_domain_error(e):
    """Turn service layer exceptions that reach Flask into JSON errors"""
    body = {"error": str(e)}
    if isinstance(e, LimitReachedError):
        body["limitReached"] = True
    return jsonify(body), e.status_code


def create_app(config=None):
    """
    Build the JobKompass API.

    Args:
        config (dict): Configuration dictionary; loaded from config.json when omitted

    Returns:
        Flask: The application
    """
    if config is None:
        config = load_config('config.json')

    app = Flask(__name__)
    CORS(app)
    app.config['CONFIG'] = config

    verify_db_schema(config, verbose=False)

    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
    app.register_error_handler(JobKompassError, handle_domain_error)
    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    app.run(debug=True, port=5001)
