"""
Tests for the tool-calling run loop and the agent tools.
"""

import json

import pytest
from unittest.mock import MagicMock, patch

from agent import AGENT_INFO, run_job_extractor
from agent.runner import MaxTurnsExceededError, execute_tool_call, run_agent
from agent.tools import (
    ADD_JOB_TOOL, GET_JOBS_TOOL, GET_USAGE_TOOL, RESUME_TOOL, ToolContext, create_resume,
)
from agent.schemas import CreateResumeParams
from generators import generate_resume_latex
from services.db_schema_service import verify_db_schema
from services.job_service import list_jobs
from services.user_service import create_user

from conftest import make_completion, make_tool_call


@pytest.fixture
def db(config):
    verify_db_schema(config, verbose=False)
    return config


@pytest.fixture
def context(db):
    user = create_user('Ada Lovelace', 'ada@example.com', 'correct-horse', db)
    return ToolContext(config=db, user_id=user['id'], username='ada')


def _resume_args(**overrides):
    args = {
        'personalInfo': {'firstName': 'Ada', 'lastName': 'Lovelace', 'email': 'ada@example.com'},
        'experience': [],
        'templateId': 'jake',
    }
    args.update(overrides)
    return args


class TestRunAgent:

    def test_returns_the_final_answer(self, context):
        client = MagicMock()
        client.chat.completions.create.return_value = make_completion('Hello!')

        result = run_agent(client, 'gpt-test', 'Be helpful', [{'role': 'user', 'content': 'Hi'}], [], context,
                           agent_name='JobKompass')

        assert result.final_output == 'Hello!'
        assert result.tool_calls == []
        assert result.agent_name == 'JobKompass'
        request = client.chat.completions.create.call_args.kwargs
        assert request['messages'][0] == {'role': 'system', 'content': 'Be helpful'}
        assert 'tools' not in request

    def test_runs_tools_then_answers(self, context):
        client = MagicMock()
        client.chat.completions.create.side_effect = [
            make_completion(tool_calls=[make_tool_call('addJobToTracker', json.dumps({
                'company': 'Acme', 'title': 'Engineer', 'skills': ['Python'],
            }))]),
            make_completion('Saved it.'),
        ]

        result = run_agent(client, 'gpt-test', 'x', [{'role': 'user', 'content': 'Add Acme'}], [ADD_JOB_TOOL],
                           context)

        assert result.final_output == 'Saved it.'
        assert result.calls_to('addJobToTracker')[0]['result']['success'] is True
        assert [job['company'] for job in list_jobs(context.user_id, context.config)] == ['Acme']
        tool_message = result.messages[-2]
        assert tool_message['role'] == 'tool'
        assert tool_message['tool_call_id'] == 'call_1'

    def test_each_request_sees_the_transcript_so_far(self, context):
        client = MagicMock()
        client.chat.completions.create.side_effect = [
            make_completion(tool_calls=[make_tool_call('getUserUsage', '{}')]),
            make_completion('You have plenty left.'),
        ]

        run_agent(client, 'gpt-test', 'x', [{'role': 'user', 'content': 'Usage?'}], [GET_USAGE_TOOL], context)

        first, second = [c.kwargs['messages'] for c in client.chat.completions.create.call_args_list]
        assert [m['role'] for m in first] == ['system', 'user']
        assert [m['role'] for m in second] == ['system', 'user', 'assistant', 'tool']

    def test_unknown_tool(self, context):
        client = MagicMock()
        client.chat.completions.create.side_effect = [
            make_completion(tool_calls=[make_tool_call('deleteEverything', '{}')]),
            make_completion('Sorry.'),
        ]

        result = run_agent(client, 'gpt-test', 'x', [], [ADD_JOB_TOOL], context)

        assert result.tool_calls[0]['result'] == {'success': False, 'error': 'Unknown tool: deleteEverything'}

    def test_max_turns(self, context):
        client = MagicMock()
        client.chat.completions.create.return_value = make_completion(
            tool_calls=[make_tool_call('getUserJobs', '{}')]
        )

        with pytest.raises(MaxTurnsExceededError):
            run_agent(client, 'gpt-test', 'x', [], [GET_JOBS_TOOL], context, max_turns=2)
        assert client.chat.completions.create.call_count == 2

    def test_pdf_is_hidden_from_the_model(self, context):
        client = MagicMock()
        client.chat.completions.create.side_effect = [
            make_completion(tool_calls=[make_tool_call('createResumeJakeTemplate', json.dumps(_resume_args()))]),
            make_completion('Done.'),
        ]
        generated = {'pdf_bytes': b'%PDF', 'file_name': 'Ada-Lovelace-resume.pdf', 'tex_file_name': 'x.tex'}

        with patch('agent.tools.generate_resume_document', return_value=generated):
            result = run_agent(client, 'gpt-test', 'x', [], [RESUME_TOOL], context)

        assert result.tool_calls[0]['result']['pdfBase64'] == 'JVBERg=='
        tool_message = json.loads(result.messages[-2]['content'])
        assert 'pdfBase64' not in tool_message
        assert tool_message['fileName'] == 'Ada-Lovelace-resume.pdf'


class TestExecuteToolCall:

    def test_invalid_json(self, context):
        arguments, result = execute_tool_call(ADD_JOB_TOOL, '{not json', context)

        assert arguments == {}
        assert result['success'] is False
        assert result['message'] == 'Invalid tool arguments'

    def test_invalid_arguments(self, context):
        _, result = execute_tool_call(ADD_JOB_TOOL, json.dumps({'company': 'Acme'}), context)

        assert result['success'] is False
        assert result['message'] == 'Invalid tool arguments'

    def test_invalid_status(self, context):
        _, result = execute_tool_call(ADD_JOB_TOOL, json.dumps({
            'company': 'Acme', 'title': 'Engineer', 'status': 'Hired',
        }), context)

        assert result['success'] is False


class TestTools:

    def test_tools_need_a_signed_in_user(self, db):
        anonymous = ToolContext(config=db)

        _, result = execute_tool_call(GET_JOBS_TOOL, '{}', anonymous)

        assert result['success'] is False
        assert result['error'] == 'Not authenticated'

    def test_add_job_limit(self, context):
        with patch('agent.tools.can_add_job', return_value={
            'allowed': False, 'limit': 10, 'used': 10, 'plan_label': 'Free', 'subscription_status': None,
            'upgrade_suggestion': None,
        }):
            _, result = execute_tool_call(ADD_JOB_TOOL, json.dumps({'company': 'Acme', 'title': 'Engineer'}), context)

        assert result['limitReached'] is True
        assert result['message'] == "Your job tracker is full for your Free plan (10 jobs)."

    def test_create_resume_limit(self, context):
        params = CreateResumeParams.model_validate(_resume_args())

        with patch('agent.tools.can_generate_document', return_value={'allowed': False, 'limit': 3, 'used': 3}):
            result = create_resume(context, params)

        assert result['success'] is False
        assert result['limitReached'] is True

    def test_resume_languages_carry_proficiency(self):
        params = CreateResumeParams.model_validate(_resume_args(additionalInfo={
            'languages': [{'language': 'French', 'proficiency': 'Fluent'}, {'language': 'Greek'}],
        }))

        languages = params.model_dump()['additionalInfo']['languages']
        assert languages == [
            {'language': 'French', 'proficiency': 'Fluent'},
            {'language': 'Greek', 'proficiency': None},
        ]
        assert 'French (Fluent), Greek' in generate_resume_latex(params.model_dump(), 'jake')

    def test_usage_tool(self, context):
        _, result = execute_tool_call(GET_USAGE_TOOL, '{}', context)

        assert result['success'] is True

    def test_agent_info_lists_chat_tools(self):
        names = [tool['name'] for tool in AGENT_INFO['tools']]

        assert 'createResumeJakeTemplate' in names
        assert 'addJobToTracker' in names


class TestJobExtractor:

    def test_only_offers_the_add_job_tool(self, context):
        client = MagicMock()
        client.chat.completions.create.return_value = make_completion('Nothing to add.')

        result = run_job_extractor(client, context.config, 'Engineer at Acme, $100k', context)

        request = client.chat.completions.create.call_args.kwargs
        assert [tool['function']['name'] for tool in request['tools']] == ['addJobToTracker']
        assert request['messages'][-1] == {'role': 'user', 'content': 'Engineer at Acme, $100k'}
        assert result.calls_to('addJobToTracker') == []
