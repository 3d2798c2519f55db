"""
Tests for the chat, retitle, resume assistant and thread endpoints.
"""

import json

import pytest
from unittest.mock import MagicMock, patch

from agent.runner import RunResult
from routes.chat_routes import build_chat_messages, split_updates

from conftest import make_completion


def _events(response):
    """Decode an SSE body into its JSON payloads."""
    body = response.get_data(as_text=True)
    return [json.loads(chunk[len('data: '):]) for chunk in body.split('\n\n') if chunk.startswith('data: ')]


class TestBuildChatMessages:

    def test_profile_is_injected_once(self):
        messages = build_chat_messages('Hi', [], 'ada')

        assert messages[0] == {'role': 'user', 'content': '[[user_profile]]\nusername: ada'}
        assert messages[-1] == {'role': 'user', 'content': 'Hi'}

        again = build_chat_messages('More', messages, 'ada')
        assert sum('[[user_profile]]' in m['content'] for m in again) == 1

    def test_unknown_roles_become_user(self):
        messages = build_chat_messages('Hi', [{'role': 'system', 'content': 'x'}, 'junk'], None)

        assert messages == [{'role': 'user', 'content': 'x'}, {'role': 'user', 'content': 'Hi'}]


class TestSplitUpdates:

    def test_updates_block(self):
        text = 'Tightened your summary.\n```updates\n[{"field": "summary", "value": "New"}]\n```'

        message, updates = split_updates(text)

        assert message == 'Tightened your summary.'
        assert updates == [{'field': 'summary', 'value': 'New'}]

    def test_unreadable_block(self):
        assert split_updates('Hi\n```updates\n{oops\n```') == ('Hi', [])

    def test_no_block(self):
        assert split_updates('  Just text ') == ('Just text', [])


class TestChat:

    @pytest.fixture(autouse=True)
    def openai_client(self):
        with patch('routes.chat_routes.get_openai_client', return_value=MagicMock()):
            yield

    def test_streams_tokens(self, client, auth_headers):
        result = RunResult(final_output='Hello there friend', agent_name='JobKompass')
        with patch('routes.chat_routes.run_chat_agent', return_value=result) as mock_run:
            response = client.post('/api/chat', headers=auth_headers, json={'message': 'Hi', 'history': []})

        assert response.mimetype == 'text/event-stream'
        events = _events(response)
        assert events[0] == {'type': 'start', 'agentName': 'JobKompass', 'lastAgentId': 'jobkompass'}
        assert ''.join(e['content'] for e in events if e['type'] == 'token') == 'Hello there friend'
        assert events[-1] == {'type': 'done'}
        context = mock_run.call_args.args[3]
        assert context.username == 'ada'

    def test_tool_calls_are_reported(self, client, auth_headers):
        calls = [{'name': 'getUserJobs', 'arguments': {}, 'result': {'success': True}}]
        result = RunResult(final_output='You have no jobs.', tool_calls=calls, agent_name='JobKompass')
        with patch('routes.chat_routes.run_chat_agent', return_value=result):
            response = client.post('/api/chat', headers=auth_headers, json={'message': 'My jobs?'})

        assert _events(response)[0]['toolCalls'] == calls

    def test_agent_failure(self, client, auth_headers):
        with patch('routes.chat_routes.run_chat_agent', side_effect=RuntimeError('boom')):
            response = client.post('/api/chat', headers=auth_headers, json={'message': 'Hi'})

        assert response.status_code == 500
        data = response.get_json()
        assert data['success'] is False
        assert data['message'] == 'Sorry, I encountered an error processing your request.'

    def test_agent_info(self, client):
        data = client.get('/api/chat').get_json()

        assert data['success'] is True
        assert data['data']['id'] == 'jobkompass'


class TestRetitle:

    def test_generates_a_title(self, client, auth_headers):
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = make_completion('  Resume tips for PM roles  ')
        with patch('routes.chat_routes.get_openai_client', return_value=openai_client):
            response = client.post('/api/chat/retitle', headers=auth_headers, json={'excerpt': 'How do I...'})

        assert response.get_json() == {'title': 'Resume tips for PM roles'}
        assert openai_client.chat.completions.create.call_args.kwargs['max_tokens'] == 50

    def test_empty_title_falls_back(self, client, auth_headers):
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = make_completion('   ')
        with patch('routes.chat_routes.get_openai_client', return_value=openai_client):
            response = client.post('/api/chat/retitle', headers=auth_headers, json={'excerpt': 'Hi'})

        assert response.get_json() == {'title': 'New chat'}

    def test_excerpt_required(self, client, auth_headers):
        response = client.post('/api/chat/retitle', headers=auth_headers, json={'excerpt': '  '})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Conversation excerpt is required'

    def test_missing_api_key(self, app, client, auth_headers):
        app.config['CONFIG']['openai_api_key'] = ''

        response = client.post('/api/chat/retitle', headers=auth_headers, json={'excerpt': 'Hi'})

        assert response.status_code == 500


class TestResumeAssist:

    def test_returns_updates(self, client, auth_headers):
        result = RunResult(final_output='Done.\n```updates\n[{"field": "skills"}]\n```')
        with patch('routes.chat_routes.get_openai_client', return_value=MagicMock()), \
                patch('routes.chat_routes.run_resume_assistant', return_value=result):
            response = client.post('/api/resume/assist', headers=auth_headers, json={'message': 'Improve it'})

        assert response.get_json() == {'success': True, 'message': 'Done.', 'updates': [{'field': 'skills'}]}

    def test_failure(self, client, auth_headers):
        with patch('routes.chat_routes.get_openai_client', side_effect=ValueError('OpenAI API key not configured')):
            response = client.post('/api/resume/assist', headers=auth_headers, json={'message': 'Improve it'})

        assert response.status_code == 500
        assert response.get_json()['success'] is False


class TestThreads:

    def test_thread_lifecycle(self, client, auth_headers):
        thread_id = client.post('/api/threads', headers=auth_headers, json={'title': 'Job search'}).get_json()['id']

        response = client.post(f"/api/threads/{thread_id}/messages", headers=auth_headers,
                               json={'role': 'user', 'content': 'Hello'})
        assert response.status_code == 201

        client.patch(f"/api/threads/{thread_id}", headers=auth_headers,
                     json={'title': 'Renamed', 'context_window_exceeded': True})
        thread = client.get(f"/api/threads/{thread_id}", headers=auth_headers).get_json()
        assert thread['thread']['title'] == 'Renamed'
        assert thread['thread']['context_window_exceeded'] is True
        assert [m['content'] for m in thread['messages']] == ['Hello']

        client.delete(f"/api/threads/{thread_id}", headers=auth_headers)
        assert client.get('/api/threads', headers=auth_headers).get_json() == []

    def test_other_users_cannot_read_threads(self, client, signup):
        _, owner_headers = signup('owner@example.com')
        _, other_headers = signup('other@example.com')
        thread_id = client.post('/api/threads', headers=owner_headers, json={}).get_json()['id']

        assert client.get(f"/api/threads/{thread_id}", headers=other_headers).status_code == 404
        response = client.post(f"/api/threads/{thread_id}/messages", headers=other_headers,
                               json={'role': 'user', 'content': 'Hi'})
        assert response.status_code == 403
