"""
Chat routes blueprint: JobKompass agent chat, thread retitling and the resume assistant.
"""
import json
import logging
import re
import time

from flask import Blueprint, jsonify, Response, request, current_app, g, stream_with_context
from agent import AGENT_INFO, ToolContext, get_openai_client, run_chat_agent, run_resume_assistant
from agent.prompts import RETITLE_INSTRUCTIONS
from services.user_service import get_or_create_username
from utils.auth_utils import login_required

logger = logging.getLogger(__name__)

# Create blueprint
chat_bp = Blueprint('chat', __name__)

USER_PROFILE_MARKER = '[[user_profile]]'
UPDATES_BLOCK = re.compile(r'```updates\s*([\s\S]*?)```')


def _history_messages(history):
    """Client history as role/content messages; unknown roles are sent as user."""
    messages = []
    for item in history or []:
        if not isinstance(item, dict):
            continue
        role = 'assistant' if item.get('role') == 'assistant' else 'user'
        messages.append({"role": role, "content": str(item.get('content') or '')})
    return messages


def build_chat_messages(message, history, username):
    """
    Conversation sent to the agent: history, a one-time user profile
    message, then the new message.
    """
    messages = _history_messages(history)
    has_profile = any(
        m['role'] == 'user' and USER_PROFILE_MARKER in m['content'] for m in messages
    )
    if username and not has_profile:
        messages.insert(0, {"role": "user", "content": f"{USER_PROFILE_MARKER}\nusername: {username}"})
    messages.append({"role": "user", "content": message})
    return messages


def sse_chunk(payload):
    return f"data: {json.dumps(payload)}\n\n"


@chat_bp.route('/api/chat', methods=['POST'])
@login_required
def chat():
    """Run the JobKompass agent and stream the answer as Server-Sent Events"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    message = data.get('message')
    if not isinstance(message, str):
        return jsonify({"success": False, "error": "message is required"}), 400

    try:
        username = (data.get('username') or '').strip() or get_or_create_username(g.user['id'], config)
        context = ToolContext(config=config, user_id=g.user['id'], username=username)
        client = get_openai_client(config)
        result = run_chat_agent(client, config, build_chat_messages(message, data.get('history'), username),
                                context)
    except Exception as e:
        logger.error(f"JobKompass chat error: {e}")
        return jsonify({
            "success": False,
            "error": str(e),
            "message": "Sorry, I encountered an error processing your request.",
            "agentName": "JobKompass",
            "history": [],
        }), 500

    full_message = result.final_output or 'No response generated'
    agent_name = result.agent_name or AGENT_INFO['name']
    start = {
        "type": "start",
        "agentName": agent_name,
        "lastAgentId": agent_name.lower().replace(' ', '-'),
    }
    if result.tool_calls:
        start["toolCalls"] = result.tool_calls
    delay = config['chat_stream_delay']

    def generate():
        yield sse_chunk(start)
        for i, word in enumerate(full_message.split(' ')):
            yield sse_chunk({"type": "token", "content": word if i == 0 else f" {word}"})
            if delay:
                time.sleep(delay)
        yield sse_chunk({"type": "done"})

    return Response(
        stream_with_context(generate()),
        mimetype='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'Connection': 'keep-alive',
        }
    )


@chat_bp.route('/api/chat', methods=['GET'])
def agent_info():
    return jsonify({"success": True, "data": AGENT_INFO})


@chat_bp.route('/api/chat/retitle', methods=['POST'])
@login_required
def retitle():
    """Generate a short title for a conversation excerpt"""
    config = current_app.config['CONFIG']
    if not config.get('openai_api_key'):
        return jsonify({"error": "OpenAI API key not configured"}), 500

    data = request.get_json(silent=True) or {}
    excerpt = data.get('excerpt').strip() if isinstance(data.get('excerpt'), str) else ''
    if not excerpt:
        return jsonify({"error": "Conversation excerpt is required"}), 400

    try:
        client = get_openai_client(config)
        response = client.chat.completions.create(
            model=config['title_model'],
            messages=[
                {"role": "system", "content": RETITLE_INSTRUCTIONS},
                {"role": "user", "content": excerpt},
            ],
            max_tokens=50,
            temperature=0.7,
        )
        raw_title = response.choices[0].message.content
        if not isinstance(raw_title, str):
            return jsonify({"error": "Invalid response from title generation"}), 502
        return jsonify({"title": raw_title.strip()[:100] or "New chat"})
    except Exception as e:
        logger.error(f"Retitle error: {e}")
        return jsonify({"error": "Failed to generate title"}), 500


def split_updates(text):
    """
    Separate the readable answer from an optional ```updates block.

    Returns:
        tuple: (message text, list of update dicts)
    """
    match = UPDATES_BLOCK.search(text or '')
    if not match:
        return (text or '').strip(), []
    try:
        updates = json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.warning("Resume assistant returned an unreadable updates block")
        updates = []
    if not isinstance(updates, list):
        updates = []
    return UPDATES_BLOCK.sub('', text).strip(), updates


@chat_bp.route('/api/resume/assist', methods=['POST'])
@login_required
def resume_assist():
    """Resume editor assistant; may suggest structured field updates"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    message = data.get('message')
    if not isinstance(message, str) or not message:
        return jsonify({"success": False, "message": "message is required"}), 400

    try:
        client = get_openai_client(config)
        history = [
            item for item in (data.get('history') or [])
            if isinstance(item, dict) and item.get('role') in ('user', 'assistant')
        ]
        result = run_resume_assistant(client, config, _history_messages(history) + [
            {"role": "user", "content": message},
        ])
        text, updates = split_updates(result.final_output)
        return jsonify({
            "success": True,
            "message": text or 'I was not able to generate a response.',
            "updates": updates,
        })
    except Exception as e:
        logger.error(f"Resume assistant error: {e}")
        return jsonify({
            "success": False,
            "message": 'Sorry, something went wrong while talking to the resume assistant.',
        }), 500
