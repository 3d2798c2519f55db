"""
Free resume generator routes blueprint. These routes need no account.
"""
import base64
import logging

from flask import Blueprint, jsonify, request, current_app
from compilers import CompilerUnavailableError, LatexCompileError
from generators import is_valid_resume_template_id
from generators.catalog import get_free_resume_templates
from services.email_list_service import FREE_RESUME, check_email
from services.errors import JobKompassError, ValidationError
from services.extraction_service import extract_resume_content
from services.free_resume_service import check_free_resume_limit, get_stats, record_generation
from services.generation_service import render_resume_pdf
from utils.pdf_utils import estimate_base64_size
from utils.sanitizer_utils import is_valid_email

logger = logging.getLogger(__name__)

# Create blueprint
free_resume_bp = Blueprint('free_resume', __name__)


@free_resume_bp.route('/api/free-resume/generate', methods=['POST'])
def generate_free_resume():
    """Extract a pasted or uploaded resume and return it rendered with a free template"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    resume_text = data.get('resume_text')
    resume_pdf = data.get('resume_pdf')
    email = data.get('email')
    template_id = data.get('template_id')

    free_ids = [t.id for t in get_free_resume_templates()]
    if not isinstance(template_id, str) or not is_valid_resume_template_id(template_id) or template_id not in free_ids:
        return jsonify({"error": "Please select a valid template"}), 400

    has_text = isinstance(resume_text, str) and bool(resume_text.strip())
    has_pdf = isinstance(resume_pdf, str) and bool(resume_pdf)
    if not has_text and not has_pdf:
        return jsonify({"error": "Please paste your resume text or upload a PDF"}), 400
    if has_pdf and estimate_base64_size(resume_pdf) > config['max_pdf_size_bytes']:
        return jsonify({"error": "PDF must be under 5MB"}), 400

    if not isinstance(email, str) or not email:
        return jsonify({"error": "Email required - please sign up to the email list first"}), 400
    email = email.strip().lower()
    if not is_valid_email(email):
        return jsonify({"error": "Invalid email format"}), 400

    if not check_email(email, FREE_RESUME, config)['found']:
        return jsonify({"error": "Email not found on list. Please sign up first or verify your email."}), 403

    limit_check = check_free_resume_limit(email, config)
    if not limit_check['can_generate']:
        return jsonify({
            "error": "You've used your 2 free resumes. Sign up to unlock unlimited resume generation.",
            "limitReached": True,
            "count": limit_check['count'],
            "limit": limit_check['limit'],
        }), 403

    try:
        content = extract_resume_content(
            config,
            resume_text=resume_text if has_text else None,
            resume_pdf_b64=resume_pdf if has_pdf else None,
            fallback_email=email,
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except JobKompassError as e:
        if e.status_code == 500:
            return jsonify({"error": str(e)}), 503
        return jsonify({"error": "AI extraction failed. Please try again.", "details": str(e)}), 502
    except Exception as e:
        is_rate_limit = '429' in str(e)
        logger.error(f"Free resume extraction failed: {e}")
        return jsonify({
            "error": ("This free tool is popular right now. Please try again in a minute."
                      if is_rate_limit else "AI extraction failed. Please try again."),
            "details": str(e),
        }), 502

    try:
        _, pdf_bytes = render_resume_pdf(content, template_id, config)
    except CompilerUnavailableError as e:
        return jsonify({"error": str(e)}), 503
    except LatexCompileError as e:
        logger.error(f"Free resume compile failed: {e}")
        return jsonify({"error": "PDF generation failed", "details": e.log or str(e)}), 500

    # Only free-tier usage is counted
    if not limit_check['is_plus_or_pro']:
        try:
            record_generation(
                config,
                'pdf' if has_pdf else 'text',
                len(resume_text) if has_text else 0,
                template_id,
                email=email,
                pdf_size_bytes=estimate_base64_size(resume_pdf) if has_pdf else None,
            )
        except Exception as e:
            logger.warning(f"Free resume stats recording failed: {e}")

    return jsonify({
        "success": True,
        "pdfBase64": base64.b64encode(pdf_bytes).decode('ascii'),
        "content": content,
    })


@free_resume_bp.route('/api/free-resume/stats')
def free_resume_stats():
    config = current_app.config['CONFIG']
    return jsonify(get_stats(config))
