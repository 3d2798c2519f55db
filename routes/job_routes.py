"""
Job tracker routes blueprint.
"""
import logging

from flask import Blueprint, jsonify, request, current_app, g
from agent import ToolContext, get_openai_client, run_job_extractor
from services.errors import NotAuthorizedError, NotFoundError, ValidationError
from services.job_service import (
    list_jobs,
    get_job,
    add_job,
    update_job,
    delete_job,
    export_jobs_csv,
)
from services.usage_service import can_add_job, job_limit_message
from services.user_service import get_or_create_username
from utils.auth_utils import login_required

logger = logging.getLogger(__name__)

# Create blueprint
job_bp = Blueprint('job', __name__)


@job_bp.route('/api/jobs', methods=['GET'])
@login_required
def get_jobs():
    """Get the user's jobs, optionally filtered by status"""
    config = current_app.config['CONFIG']
    jobs = list_jobs(g.user['id'], config, status=request.args.get('status'))
    return jsonify(jobs)


@job_bp.route('/api/jobs', methods=['POST'])
@login_required
def create_job():
    """Add a job to the tracker"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    check = can_add_job(g.user['id'], config)
    if not check['allowed']:
        return jsonify({
            "error": "Job limit reached",
            "message": job_limit_message(check),
            "limitReached": True,
        }), 403
    try:
        job = add_job(g.user['id'], data, config)
        return jsonify(job), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@job_bp.route('/api/jobs/<int:job_id>', methods=['GET'])
@login_required
def job_details(job_id):
    """Get job details by ID"""
    config = current_app.config['CONFIG']
    try:
        job = get_job(job_id, g.user['id'], config)
    except NotAuthorizedError as e:
        return jsonify({"error": str(e)}), 403
    if job:
        return jsonify(job)
    else:
        return jsonify({"error": "Job not found"}), 404


@job_bp.route('/api/jobs/<int:job_id>', methods=['PUT'])
@login_required
def edit_job(job_id):
    """Update a job"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    try:
        job = update_job(job_id, g.user['id'], data, config)
        return jsonify(job)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotAuthorizedError as e:
        return jsonify({"error": str(e)}), 403
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        return jsonify({"error": str(e)}), 500


@job_bp.route('/api/jobs/<int:job_id>', methods=['DELETE'])
@login_required
def remove_job(job_id):
    """Delete a job"""
    config = current_app.config['CONFIG']
    try:
        delete_job(job_id, g.user['id'], config)
        return jsonify({"success": True})
    except NotAuthorizedError as e:
        return jsonify({"error": str(e)}), 403
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@job_bp.route('/api/jobs/add', methods=['POST'])
@login_required
def add_jobs_from_text():
    """Extract one or more jobs from free text and add them to the tracker"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    job_information = data.get('job_information')

    if not isinstance(job_information, str) or not job_information.strip():
        return jsonify({"error": "Job information is required"}), 400

    try:
        client = get_openai_client(config)
        context = ToolContext(
            config=config,
            user_id=g.user['id'],
            username=get_or_create_username(g.user['id'], config),
        )
        result = run_job_extractor(client, config, job_information, context)

        calls = result.calls_to('addJobToTracker')
        if not calls:
            return jsonify({
                "success": False,
                "error": ("No jobs were extracted from the provided information. "
                          "Please provide more details about the job(s) you want to add."),
                "agent_response": result.final_output,
            }), 400

        successful = [call for call in calls if call['result'].get('success')]
        failed = [call for call in calls if not call['result'].get('success')]

        if not successful:
            first = failed[0]['result']
            return jsonify({
                "success": False,
                "error": first.get('message') or first.get('error') or "Failed to add jobs",
                "limitReached": bool(first.get('limitReached')),
                "agent_response": result.final_output,
            }), 400

        if len(successful) == 1:
            message = "Job added successfully!"
        else:
            message = f"{len(successful)} jobs added successfully!"
        return jsonify({
            "success": True,
            "message": message,
            "jobs_added": len(successful),
            "failed_jobs": len(failed),
            "agent_response": result.final_output,
        })
    except ValueError as e:
        return jsonify({"error": str(e)}), 500
    except Exception as e:
        logger.error(f"Error adding jobs: {e}")
        return jsonify({"success": False, "error": str(e)}), 500


@job_bp.route('/api/jobs/export', methods=['GET'])
@login_required
def export_jobs():
    """Export the tracker to CSV"""
    config = current_app.config['CONFIG']
    try:
        return export_jobs_csv(g.user['id'], config)
    except Exception as e:
        return jsonify({"error": str(e)}), 500
