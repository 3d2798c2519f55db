"""
Marketing routes blueprint: contact form, email list and waitlist.
"""
from flask import Blueprint, jsonify, request, current_app
from services.contact_service import add_contact
from services.email_list_service import SUBMISSION_TYPES, add_email, check_email, join_waitlist

# Create blueprint
contact_bp = Blueprint('contact', __name__)


@contact_bp.route('/api/contact', methods=['POST'])
def submit_contact():
    """Store a contact form submission"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    result = add_contact(
        data.get('name'),
        data.get('email'),
        data.get('subject'),
        data.get('message'),
        config,
        ip_address=request.headers.get('X-Forwarded-For', request.remote_addr),
        user_agent=request.headers.get('User-Agent'),
    )
    if not result['success']:
        status = 429 if result['message'].startswith('Too many') else 400
        return jsonify(result), status
    return jsonify(result)


@contact_bp.route('/api/email-list', methods=['POST'])
def join_email_list():
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    submission_type = data.get('submission_type')
    if submission_type not in SUBMISSION_TYPES:
        return jsonify({"success": False, "message": f"Invalid submission type: {submission_type}"}), 400
    result = add_email(data.get('email'), submission_type, config, name=data.get('name'))
    if not result['success']:
        return jsonify(result), 400
    return jsonify(result)


@contact_bp.route('/api/email-list/check')
def check_email_list():
    config = current_app.config['CONFIG']
    submission_type = request.args.get('submission_type', 'free-resume')
    return jsonify(check_email(request.args.get('email'), submission_type, config))


@contact_bp.route('/api/waitlist', methods=['POST'])
def waitlist():
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    result = join_waitlist(data.get('email'), config, name=data.get('name'))
    if not result['success']:
        return jsonify(result), 400
    return jsonify(result)
