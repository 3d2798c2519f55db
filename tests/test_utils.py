"""
Tests for sanitization, OpenRouter, config and time helpers.
"""

from datetime import datetime

import pytest
from unittest.mock import MagicMock, patch

from utils.config_utils import load_config, public_config
from utils.openrouter_utils import OpenRouterError, call_openrouter, extract_json_payload
from utils.pdf_utils import estimate_base64_size, strip_pdf_data_url
from utils.sanitizer_utils import (
    normalize_whitespace, sanitize_by_type, sanitize_email, sanitize_input, sanitize_rich_text, sanitize_url,
    sanitize_string_list, sanitize_username, validate_and_sanitize, validate_length,
)
from utils.time_utils import format_generated_time, format_letter_date, month_start_ms


class TestSanitizer:

    def test_sanitize_input(self):
        assert sanitize_input('  <b>Tom & Jerry</b>\x07 ') == '&lt;b&gt;Tom &amp; Jerry&lt;&#x2F;b&gt;'
        assert sanitize_input('price $where') == 'price'
        assert sanitize_input('JavaScript:alert(1)') == 'alert(1)'
        assert sanitize_input(42) == '42'

    def test_sanitize_rich_text(self):
        html = '<p onclick="steal()">Hello</p><script>alert(1)</script><a href="javascript:x">link</a>'

        cleaned = sanitize_rich_text(html)

        assert '<script>' not in cleaned
        assert 'onclick' not in cleaned
        assert 'javascript:' not in cleaned
        assert '<p>Hello</p>' in cleaned

    @pytest.mark.parametrize('raw,expected', [
        (' Ada@Example.COM ', 'ada@example.com'),
        ('ada@example', ''),
        ('ada example@x.com', ''),
        (None, ''),
    ])
    def test_sanitize_email(self, raw, expected):
        assert sanitize_email(raw) == expected

    def test_sanitize_username(self):
        assert sanitize_username('ada lovelace!') == 'adalovelace'
        assert sanitize_username('ab') == ''
        assert sanitize_username('a' * 31) == ''

    def test_sanitize_url(self):
        assert sanitize_url(' https://example.com/a ') == 'https://example.com/a'
        assert sanitize_url('data:text/html;base64,xyz') == ''
        assert sanitize_url('ftp://example.com') == ''
        assert sanitize_url('https://') == ''

    def test_textarea_keeps_apostrophes(self):
        assert sanitize_by_type("It's a/b", 'textarea') == "It's a/b"
        assert sanitize_by_type("It's", 'text') == 'It&#x27;s'

    def test_sanitize_string_list(self):
        assert sanitize_string_list(None) == []
        assert sanitize_string_list('python') == ['python']
        assert sanitize_string_list(['  a ', '', 'b']) == ['a', 'b']
        assert sanitize_string_list(['a', 1]) is None
        assert sanitize_string_list(5) is None

    def test_length_and_whitespace(self):
        assert validate_length('  abc  ', 3, 3) is True
        assert validate_length(None) is False
        assert normalize_whitespace(' a \n\t b ') == 'a b'

    def test_validate_and_sanitize(self):
        assert validate_and_sanitize('', required=True) == {
            "is_valid": False, "sanitized": '', "errors": ['This field is required'],
        }

        result = validate_and_sanitize('abcdef', max_length=3, pattern=r'^\d+$', custom_validator=lambda v: False)
        assert result['errors'] == ['Must be no more than 3 characters', 'Invalid format', 'Validation failed']

        result = validate_and_sanitize('nope', 'email')
        assert result['errors'] == ['Invalid email address']


class TestOpenRouter:

    def _response(self, status_code, content=None):
        response = MagicMock(status_code=status_code, text='error body')
        response.json.return_value = {'choices': [{'message': {'content': content}}]}
        return response

    def test_primary_model_answers(self):
        with patch('utils.openrouter_utils.requests.post', return_value=self._response(200, ' Hi ')) as mock_post:
            content, model = call_openrouter([{'role': 'user', 'content': 'x'}], 'key', ['a', 'b'], title='Test')

        assert (content, model) == ('Hi', 'a')
        headers = mock_post.call_args.kwargs['headers']
        assert headers['Authorization'] == 'Bearer key'
        assert headers['X-Title'] == 'Test'

    def test_falls_back_after_rate_limits(self):
        responses = [self._response(429), self._response(429), self._response(200, 'From fallback')]
        with patch('utils.openrouter_utils.requests.post', side_effect=responses) as mock_post, \
                patch('utils.openrouter_utils.time.sleep'):
            content, model = call_openrouter([], 'key', ['a', 'b'])

        assert (content, model) == ('From fallback', 'b')
        assert [c.kwargs['json']['model'] for c in mock_post.call_args_list] == ['a', 'a', 'b']

    def test_error_status(self):
        with patch('utils.openrouter_utils.requests.post', return_value=self._response(401)):
            with pytest.raises(OpenRouterError) as exc_info:
                call_openrouter([], 'key', ['a'])

        assert exc_info.value.status_code == 401

    def test_content_parts(self):
        response = self._response(200, [{'type': 'text', 'text': 'Hello'}, {'type': 'image'}])
        with patch('utils.openrouter_utils.requests.post', return_value=response):
            assert call_openrouter([], 'key', ['a'])[0] == 'Hello'

    def test_extract_json_payload(self):
        text = '<think>hmm</think>\n```json\n{"title": "Engineer"}\n```'

        assert extract_json_payload(text) == {'title': 'Engineer'}
        with pytest.raises(ValueError):
            extract_json_payload('not json')


class TestConfig:

    def test_defaults_and_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv('LATEX_SERVICE_URL', 'https://latex.example.com')

        config = load_config(str(tmp_path / 'missing.json'))

        assert config['latex_compiler'] == 'remote'

    def test_public_config_hides_secrets(self, config):
        public = public_config(config)

        assert 'openai_api_key' not in public
        assert 'db_path' not in public


class TestTimeAndPdf:

    def test_formatting(self):
        now = datetime(2025, 6, 10, 15, 4)

        assert format_generated_time(now) == 'Jun 10, 2025 03:04 PM'
        assert format_letter_date(now) == 'June 10, 2025'
        assert month_start_ms(now) == int(datetime(2025, 6, 1).timestamp() * 1000)

    def test_pdf_payload_helpers(self):
        payload = 'data:application/pdf;base64,AAAA'

        assert strip_pdf_data_url(payload) == 'AAAA'
        assert estimate_base64_size(payload) == 3
