"""
One-shot template generation routes blueprint.
"""
import logging
import secrets
import time

from flask import Blueprint, jsonify, request, current_app, g
from agent import ToolContext, get_openai_client, run_template_generator
from routes.shared_state import get_generation_status, update_generation_status
from services.document_service import get_resume
from services.errors import JobKompassError, LimitReachedError, NotFoundError
from services.generation_service import check_document_limit
from services.job_service import get_job
from services.user_service import get_or_create_username, get_resume_preferences
from utils.auth_utils import login_required

logger = logging.getLogger(__name__)

# Create blueprint
template_bp = Blueprint('template', __name__)

TEMPLATE_TYPES = ('resume', 'cover-letter')


def _job_details(job_id, user_id, config):
    """Tracked job for the generation context; lookup errors are ignored."""
    if not job_id:
        return None
    try:
        return get_job(int(job_id), user_id, config)
    except (JobKompassError, ValueError) as e:
        logger.warning(f"Error fetching job details (ignored): {e}")
        return None


@template_bp.route('/api/template/generate', methods=['POST'])
@login_required
def generate_from_template():
    """Generate and save a resume or cover letter in a single agent run"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    user_id = g.user['id']
    request_id = f"req_{int(time.time() * 1000)}_{secrets.token_hex(4)}"

    template_type = data.get('template_type')
    template_id = data.get('template_id') or 'jake'
    job_title = data.get('job_title')
    job_company = data.get('job_company')
    reference_resume_id = data.get('reference_resume_id')

    if template_type not in TEMPLATE_TYPES:
        return jsonify({"success": False, "error": "template_type must be resume or cover-letter"}), 400
    if template_type == 'resume' and not reference_resume_id:
        return jsonify({"success": False, "error": "Reference resume ID is required for resume generation"}), 400

    logger.info(f"[{request_id}] [TEMPLATE_GENERATE] Starting {template_type} generation with {template_id}")

    reference_resume = None
    if template_type == 'resume':
        try:
            reference_resume = get_resume(int(reference_resume_id), user_id, config)
        except (NotFoundError, ValueError):
            return jsonify({"success": False, "error": "Reference resume not found"}), 404

    try:
        check_document_limit(user_id, config)
    except LimitReachedError as e:
        logger.warning(f"[{request_id}] [TEMPLATE_GENERATE] Document limit reached ({e.used}/{e.limit})")
        return jsonify({
            "success": False,
            "error": "Document limit reached",
            "message": str(e),
            "limitReached": True,
        }), 403

    update_generation_status(user_id, f"Generating {template_type}...", template_type=template_type)
    try:
        client = get_openai_client(config)
        context = ToolContext(config=config, user_id=user_id, username=get_or_create_username(user_id, config))
        result, tool_name = run_template_generator(
            client, config, template_type, template_id, context,
            reference_resume=reference_resume,
            job_details=_job_details(data.get('job_id'), user_id, config),
            job_title=job_title,
            job_company=job_company,
            current_user=g.user,
            resume_preferences=get_resume_preferences(user_id, config),
        )
    except Exception as e:
        logger.error(f"[{request_id}] [TEMPLATE_GENERATE] Template generation error: {e}")
        update_generation_status(user_id, str(e), completed=True, success=False)
        return jsonify({"success": False, "error": str(e)}), 500

    calls = result.calls_to(tool_name)
    if not calls:
        logger.error(f"[{request_id}] [TEMPLATE_GENERATE] Generation tool was not called")
        update_generation_status(user_id, "Generation tool was not called", completed=True, success=False)
        return jsonify({
            "success": False,
            "error": "Generation tool was not called. The agent may not have been able to generate the document.",
            "agent_response": result.final_output,
        }), 500

    tool_result = calls[0]['result']
    if isinstance(tool_result, dict) and not tool_result.get('success'):
        update_generation_status(user_id, tool_result.get('message') or "Document generation failed",
                                 completed=True, success=False)
        return jsonify({
            "success": False,
            "error": tool_result.get('error') or "Failed to generate document",
            "message": tool_result.get('message') or "Document generation failed",
        }), 500

    kind = 'Resume' if template_type == 'resume' else 'Cover letter'
    message = f"{kind} generated and saved successfully"
    update_generation_status(user_id, message, completed=True, success=True)
    logger.info(f"[{request_id}] [TEMPLATE_GENERATE] {message}")
    return jsonify({"success": True, "message": message})


@template_bp.route('/api/template/status')
@login_required
def generation_status():
    """Get the last template generation status"""
    return jsonify(get_generation_status(g.user['id']))
