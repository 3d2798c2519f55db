"""
Document routes blueprint: resumes, cover letters, email templates and file downloads.
"""
import base64
import binascii
import io
import logging

from flask import Blueprint, jsonify, request, current_app, g, send_file
from services.document_service import (
    store_file,
    get_file,
    list_resumes,
    get_resume,
    save_resume,
    update_resume,
    delete_resume,
    list_cover_letters,
    get_cover_letter,
    save_cover_letter,
    update_cover_letter,
    delete_cover_letter,
    list_email_templates,
    get_email_template,
    save_email_template,
    update_email_template,
    delete_email_template,
)
from services.errors import JobKompassError, ValidationError
from services.extraction_service import ResumeExtractionError, extract_resume_content
from utils.auth_utils import login_required
from utils.openrouter_utils import OpenRouterError
from utils.pdf_utils import estimate_base64_size, strip_pdf_data_url

logger = logging.getLogger(__name__)

# Create blueprint
document_bp = Blueprint('document', __name__)


def _store_upload(data, config):
    """
    Store an uploaded file sent as base64 in the request body.

    Returns:
        tuple: (file_id, file_size), or (None, None) when nothing was uploaded
    """
    payload = data.get('file_base64')
    if not payload:
        return None, None
    try:
        file_bytes = base64.b64decode(strip_pdf_data_url(payload), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid file data")
    if len(file_bytes) > config['max_pdf_size_bytes']:
        raise ValidationError("File is too large")
    file_id = store_file(
        g.user['id'],
        file_bytes,
        data.get('file_type') or 'application/pdf',
        data.get('file_name') or 'upload.pdf',
        config,
    )
    return file_id, len(file_bytes)


# Resumes

@document_bp.route('/api/documents/resumes', methods=['GET'])
@login_required
def get_resumes():
    config = current_app.config['CONFIG']
    return jsonify(list_resumes(g.user['id'], config))


@document_bp.route('/api/documents/resumes', methods=['POST'])
@login_required
def create_resume():
    """Save a resume, optionally with an uploaded file"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    file_id, file_size = _store_upload(data, config)
    resume = save_resume(g.user['id'], data, config, file_id=file_id, file_size=file_size)
    return jsonify(resume), 201


@document_bp.route('/api/documents/resumes/<int:resume_id>', methods=['GET'])
@login_required
def resume_details(resume_id):
    config = current_app.config['CONFIG']
    return jsonify(get_resume(resume_id, g.user['id'], config))


@document_bp.route('/api/documents/resumes/<int:resume_id>', methods=['PUT'])
@login_required
def edit_resume(resume_id):
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    return jsonify(update_resume(resume_id, g.user['id'], data, config))


@document_bp.route('/api/documents/resumes/<int:resume_id>', methods=['DELETE'])
@login_required
def remove_resume(resume_id):
    config = current_app.config['CONFIG']
    delete_resume(resume_id, g.user['id'], config)
    return jsonify({"success": True})


# Cover letters

@document_bp.route('/api/documents/cover-letters', methods=['GET'])
@login_required
def get_cover_letters():
    config = current_app.config['CONFIG']
    return jsonify(list_cover_letters(g.user['id'], config))


@document_bp.route('/api/documents/cover-letters', methods=['POST'])
@login_required
def create_cover_letter():
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    file_id, file_size = _store_upload(data, config)
    letter = save_cover_letter(g.user['id'], data, config, file_id=file_id, file_size=file_size)
    return jsonify(letter), 201


@document_bp.route('/api/documents/cover-letters/<int:letter_id>', methods=['GET'])
@login_required
def cover_letter_details(letter_id):
    config = current_app.config['CONFIG']
    return jsonify(get_cover_letter(letter_id, g.user['id'], config))


@document_bp.route('/api/documents/cover-letters/<int:letter_id>', methods=['PUT'])
@login_required
def edit_cover_letter(letter_id):
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    return jsonify(update_cover_letter(letter_id, g.user['id'], data, config))


@document_bp.route('/api/documents/cover-letters/<int:letter_id>', methods=['DELETE'])
@login_required
def remove_cover_letter(letter_id):
    config = current_app.config['CONFIG']
    delete_cover_letter(letter_id, g.user['id'], config)
    return jsonify({"success": True})


# Email templates

@document_bp.route('/api/documents/email-templates', methods=['GET'])
@login_required
def get_email_templates():
    config = current_app.config['CONFIG']
    return jsonify(list_email_templates(g.user['id'], config))


@document_bp.route('/api/documents/email-templates', methods=['POST'])
@login_required
def create_email_template():
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    return jsonify(save_email_template(g.user['id'], data, config)), 201


@document_bp.route('/api/documents/email-templates/<int:template_id>', methods=['GET'])
@login_required
def email_template_details(template_id):
    config = current_app.config['CONFIG']
    return jsonify(get_email_template(template_id, g.user['id'], config))


@document_bp.route('/api/documents/email-templates/<int:template_id>', methods=['PUT'])
@login_required
def edit_email_template(template_id):
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    return jsonify(update_email_template(template_id, g.user['id'], data, config))


@document_bp.route('/api/documents/email-templates/<int:template_id>', methods=['DELETE'])
@login_required
def remove_email_template(template_id):
    config = current_app.config['CONFIG']
    delete_email_template(template_id, g.user['id'], config)
    return jsonify({"success": True})


# Files

@document_bp.route('/api/files/<int:file_id>', methods=['GET'])
@login_required
def download_file(file_id):
    """Download a stored document"""
    config = current_app.config['CONFIG']
    stored = get_file(file_id, g.user['id'], config)
    return send_file(
        io.BytesIO(stored['data']),
        mimetype=stored['content_type'],
        as_attachment=True,
        download_name=stored['file_name'],
    )


@document_bp.route('/api/documents/parse-resume-pdf', methods=['POST'])
@login_required
def parse_resume_pdf():
    """Extract structured resume content from an uploaded PDF"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    resume_pdf = data.get('resume_pdf')
    if not resume_pdf:
        return jsonify({"error": "resume_pdf is required"}), 400
    if estimate_base64_size(resume_pdf) > config['max_pdf_size_bytes']:
        return jsonify({"error": "PDF must be under 5MB"}), 400

    try:
        content = extract_resume_content(config, resume_pdf_b64=resume_pdf, fallback_email=g.user['email'])
        return jsonify({"success": True, "content": content})
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except (ResumeExtractionError, OpenRouterError) as e:
        logger.error(f"Resume extraction failed: {e}")
        return jsonify({"error": str(e)}), 502
    except JobKompassError as e:
        return jsonify({"error": str(e)}), 500
