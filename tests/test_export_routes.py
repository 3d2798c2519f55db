"""
Tests for resume and cover letter export endpoints.
"""

from unittest.mock import patch

from compilers import CompilerUnavailableError, LatexCompileError


class TestResumeExport:

    def test_export_pdf(self, client, auth_headers, sample_resume_content):
        with patch('routes.export_routes.render_resume_pdf', return_value=('tex', b'%PDF-1.4')) as mock_render:
            response = client.post('/api/resume/export/vertex', headers=auth_headers,
                                   json={'content': sample_resume_content})

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data == b'%PDF-1.4'
        assert 'Ada-Lovelace-resume.pdf' in response.headers['Content-Disposition']
        assert mock_render.call_args.args[1] == 'vertex'

    def test_default_template_is_jake(self, client, auth_headers, sample_resume_content):
        with patch('routes.export_routes.render_resume_pdf', return_value=('tex', b'%PDF')) as mock_render:
            client.post('/api/resume/export', headers=auth_headers, json={'content': sample_resume_content})

        assert mock_render.call_args.args[1] == 'jake'

    def test_invalid_template(self, client, auth_headers, sample_resume_content):
        response = client.post('/api/resume/export/fancy', headers=auth_headers,
                               json={'content': sample_resume_content})

        assert response.status_code == 400
        assert response.get_json()['error'] == (
            'Invalid template: fancy. Valid: jake, vertex, minimal, executive, momentum'
        )

    def test_missing_content(self, client, auth_headers):
        response = client.post('/api/resume/export/jake', headers=auth_headers, json={})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing resume content'

    def test_compile_error_returns_the_log(self, client, auth_headers, sample_resume_content):
        error = LatexCompileError('LaTeX compilation failed', log='! Missing $ inserted.')
        with patch('routes.export_routes.render_resume_pdf', side_effect=error):
            response = client.post('/api/resume/export/jake', headers=auth_headers,
                                   json={'content': sample_resume_content})

        assert response.status_code == 500
        assert response.get_json() == {'error': 'LaTeX compilation failed', 'log': '! Missing $ inserted.'}

    def test_compiler_unavailable(self, client, auth_headers, sample_resume_content):
        with patch('routes.export_routes.render_resume_pdf',
                   side_effect=CompilerUnavailableError('LaTeX service not configured')):
            response = client.post('/api/resume/export/jake', headers=auth_headers,
                                   json={'content': sample_resume_content})

        assert response.status_code == 503

    def test_latex_source(self, client, auth_headers, sample_resume_content):
        response = client.post('/api/resume/latex/minimal', headers=auth_headers,
                               json={'content': sample_resume_content})

        assert response.status_code == 200
        assert '\\begin{document}' in response.get_json()['latex']


class TestCoverLetterExport:

    def test_latex_pdf(self, client, auth_headers, sample_cover_letter_content):
        with patch('routes.export_routes.render_cover_letter_pdf', return_value=('tex', b'%PDF')):
            response = client.post('/api/coverletter/export/jake', headers=auth_headers,
                                   json={'content': sample_cover_letter_content})

        assert response.status_code == 200
        assert 'Ada-Lovelace-cover-letter.pdf' in response.headers['Content-Disposition']

    def test_docx(self, client, auth_headers, sample_cover_letter_content):
        response = client.post('/api/coverletter/export/docx', headers=auth_headers,
                               json={'content': sample_cover_letter_content})

        assert response.status_code == 200
        assert response.mimetype == 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
        assert 'Cover_Letter_Acme_Engineer_' in response.headers['Content-Disposition']
        # DOCX files are zip archives
        assert response.data[:2] == b'PK'

    def test_plain_pdf(self, client, auth_headers, sample_cover_letter_content):
        response = client.post('/api/coverletter/export/plain-pdf', headers=auth_headers,
                               json={'content': sample_cover_letter_content})

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')

    def test_missing_content(self, client, auth_headers):
        response = client.post('/api/coverletter/export/docx', headers=auth_headers, json={})

        assert response.status_code == 400
