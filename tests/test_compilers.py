"""
Tests for the LaTeX compiler backends.
"""

import base64
import os
import subprocess

import pytest
from unittest.mock import MagicMock, patch

from compilers import (
    CompilerUnavailableError, LatexCompileError, LocalCompiler, RemoteCompiler, build_pdf_filename, get_compiler,
)


class TestGetCompiler:

    def test_local_by_default(self):
        assert isinstance(get_compiler({'latex_compiler': 'local'}), LocalCompiler)

    def test_remote_needs_a_service_url(self):
        with pytest.raises(CompilerUnavailableError):
            get_compiler({'latex_compiler': 'remote', 'latex_service_url': ''})

    def test_remote(self):
        compiler = get_compiler({'latex_compiler': 'remote', 'latex_service_url': 'http://latex:8080'})
        assert isinstance(compiler, RemoteCompiler)
        assert compiler.name == 'remote'


class TestBuildPdfFilename:

    def test_names_are_cleaned(self):
        assert build_pdf_filename('Ada', "O'Brien", 'resume') == 'Ada-OBrien-resume.pdf'

    def test_empty_names(self):
        assert build_pdf_filename('', None, 'cover-letter') == 'cover-letter.pdf'


class TestLocalCompiler:

    def test_returns_the_pdf(self):
        compiler = LocalCompiler({'pdflatex_path': 'pdflatex', 'latex_timeout': 5})

        def fake_run(command, cwd, **kwargs):
            with open(os.path.join(cwd, 'doc.pdf'), 'wb') as f:
                f.write(b'%PDF-1.4 test')
            return MagicMock(returncode=0)

        with patch('compilers.local_compiler.subprocess.run', side_effect=fake_run) as mock_run:
            pdf = compiler.compile('\\documentclass{article}', 'doc')

        assert pdf == b'%PDF-1.4 test'
        assert mock_run.call_count == 2

    def test_no_pdf_raises_with_log(self):
        compiler = LocalCompiler({'latex_timeout': 5})

        def fake_run(command, cwd, **kwargs):
            with open(os.path.join(cwd, 'doc.log'), 'w') as f:
                f.write('! Undefined control sequence.')
            return MagicMock(returncode=1)

        with patch('compilers.local_compiler.subprocess.run', side_effect=fake_run):
            with pytest.raises(LatexCompileError) as exc_info:
                compiler.compile('\\bad', 'doc')

        assert 'Undefined control sequence' in exc_info.value.log

    def test_missing_executable(self):
        compiler = LocalCompiler({'pdflatex_path': '/nope/pdflatex'})

        with patch('compilers.local_compiler.subprocess.run', side_effect=FileNotFoundError()):
            with pytest.raises(LatexCompileError, match='pdflatex not found'):
                compiler.compile('x', 'doc')

    def test_timeout(self):
        compiler = LocalCompiler({'latex_timeout': 1})

        with patch('compilers.local_compiler.subprocess.run',
                   side_effect=subprocess.TimeoutExpired('pdflatex', 1)):
            with pytest.raises(LatexCompileError, match='timed out'):
                compiler.compile('x', 'doc')


class TestRemoteCompiler:

    @pytest.fixture
    def compiler(self):
        return RemoteCompiler({'latex_service_url': 'http://latex:8080/', 'latex_timeout': 5})

    def test_posts_to_compile_endpoint(self, compiler):
        response = MagicMock(ok=True)
        response.json.return_value = {'pdfBase64': base64.b64encode(b'%PDF').decode()}

        with patch('compilers.remote_compiler.requests.post', return_value=response) as mock_post:
            pdf = compiler.compile('tex', 'resume-1')

        assert pdf == b'%PDF'
        mock_post.assert_called_once_with(
            'http://latex:8080/compile', json={'latex': 'tex', 'filename': 'resume-1'}, timeout=5,
        )

    def test_service_error(self, compiler):
        response = MagicMock(ok=False, status_code=500, reason='Internal Server Error')
        response.json.return_value = {'error': 'LaTeX compilation failed', 'log': 'x' * 5000}

        with patch('compilers.remote_compiler.requests.post', return_value=response):
            with pytest.raises(LatexCompileError) as exc_info:
                compiler.compile('tex', 'resume-1')

        assert len(exc_info.value.log) == 2000

    def test_missing_pdf(self, compiler):
        response = MagicMock(ok=True)
        response.json.return_value = {}

        with patch('compilers.remote_compiler.requests.post', return_value=response):
            with pytest.raises(LatexCompileError, match='did not return a PDF'):
                compiler.compile('tex', 'resume-1')
