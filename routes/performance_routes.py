"""
Job hunt performance routes blueprint.
"""
import logging

from flask import Blueprint, jsonify, request, current_app, g
from services.performance_service import compute_job_stats, generate_summary
from utils.auth_utils import login_required
from utils.openrouter_utils import OpenRouterError

logger = logging.getLogger(__name__)

# Create blueprint
performance_bp = Blueprint('performance', __name__)


@performance_bp.route('/api/performance/stats')
@login_required
def performance_stats():
    config = current_app.config['CONFIG']
    return jsonify(compute_job_stats(g.user['id'], config))


@performance_bp.route('/api/performance/summary', methods=['POST'])
@login_required
def performance_summary():
    """AI coaching summary for posted stats, or for the user's tracker"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    stats = data.get('stats')
    if stats is not None:
        total_jobs = stats.get('total_jobs') if isinstance(stats, dict) else None
        if isinstance(total_jobs, bool) or not isinstance(total_jobs, (int, float)):
            return jsonify({"error": "Invalid stats provided"}), 400
    else:
        stats = compute_job_stats(g.user['id'], config)

    if not config.get('openrouter_api_key'):
        return jsonify({"error": "OpenRouter not configured"}), 500

    try:
        summary, model_used = generate_summary(stats, config)
    except OpenRouterError as e:
        logger.error(f"Performance summary error: {e}")
        return jsonify({"error": f"AI generation failed: {e.status_code}"}), 500
    except Exception as e:
        logger.error(f"Performance summary error: {e}")
        return jsonify({"error": str(e) or "Failed to generate summary"}), 500

    if not summary:
        return jsonify({"error": "AI did not return a valid summary"}), 500
    return jsonify({"success": True, "summary": summary, "model_used": model_used})
