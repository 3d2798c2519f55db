"""
Shared fixtures for the JobKompass test suite.
"""

import pytest
from unittest.mock import MagicMock

from app import create_app
from utils.config_utils import DEFAULT_CONFIG


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at a throwaway SQLite database."""
    return {
        **DEFAULT_CONFIG,
        'db_path': str(tmp_path / 'jobkompass-test.db'),
        'openai_api_key': 'sk-test',
        'chat_stream_delay': 0,
    }


@pytest.fixture
def app(config):
    """Create Flask app for testing."""
    app = create_app(config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def signup(client):
    """Register a user through the API and return (user, headers)."""
    def _signup(email='ada@example.com', name='Ada Lovelace', password='correct-horse'):
        response = client.post('/api/auth/signup', json={'name': name, 'email': email, 'password': password})
        assert response.status_code == 201
        data = response.get_json()
        return data['user'], {'Authorization': f"Bearer {data['token']}"}
    return _signup


@pytest.fixture
def auth_headers(signup):
    _, headers = signup()
    return headers


@pytest.fixture
def user(signup):
    """A registered user dict; its session headers are under user['headers']."""
    user, headers = signup('grace@example.com', 'Grace Hopper')
    return {**user, 'headers': headers}


@pytest.fixture
def sample_resume_content():
    return {
        'personalInfo': {
            'firstName': 'Ada',
            'lastName': 'Lovelace',
            'email': 'ada@example.com',
            'location': 'London, UK',
            'linkedin': 'linkedin.com/in/ada',
            'github': 'https://github.com/ada',
        },
        'experience': [
            {
                'company': 'Analytical Engines & Co',
                'title': 'Programmer',
                'location': 'London',
                'date': '1842 -- 1843',
                'details': ['Wrote the first published algorithm', 'Cut runtime by 50%'],
            }
        ],
        'education': [
            {
                'name': 'University of London',
                'degree': 'BSc',
                'field': 'Mathematics',
                'startDate': '1830',
                'endDate': '1834',
            }
        ],
        'projects': [],
        'skills': {'technical': ['Python', 'LaTeX'], 'additional': ['Poetry']},
        'additionalInfo': {},
    }


@pytest.fixture
def sample_cover_letter_content():
    return {
        'personalInfo': {'firstName': 'Ada', 'lastName': 'Lovelace', 'email': 'ada@example.com'},
        'jobInfo': {'company': 'Acme', 'position': 'Engineer', 'hiringManagerName': 'Jane Doe'},
        'letterContent': {
            'openingParagraph': 'I am excited to apply.',
            'bodyParagraphs': ['I built things.', 'I shipped things.'],
            'closingParagraph': 'Thank you for your time.',
        },
    }


def make_completion(content=None, tool_calls=None):
    """A chat completion response shaped like the OpenAI client's."""
    message = MagicMock()
    message.content = content
    message.tool_calls = tool_calls
    response = MagicMock()
    response.choices = [MagicMock(message=message)]
    return response


def make_tool_call(name, arguments, call_id='call_1'):
    call = MagicMock()
    call.id = call_id
    call.function.name = name
    call.function.arguments = arguments
    return call
