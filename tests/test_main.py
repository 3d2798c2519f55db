"""
Tests for the command line tools.
"""

import json

from unittest.mock import patch

from main import main


def test_render_tex(tmp_path, sample_resume_content):
    content_path = tmp_path / 'resume.json'
    content_path.write_text(json.dumps(sample_resume_content))
    out = tmp_path / 'resume.pdf'

    exit_code = main(['render', str(content_path), '--template', 'minimal', '--tex', '--out', str(out),
                      '--config', str(tmp_path / 'missing.json')])

    assert exit_code == 0
    assert '\\begin{document}' in (tmp_path / 'resume.tex').read_text()


def test_render_pdf(tmp_path, sample_resume_content):
    content_path = tmp_path / 'resume.json'
    content_path.write_text(json.dumps(sample_resume_content))
    out = tmp_path / 'resume.pdf'

    with patch('main.get_compiler') as mock_get_compiler:
        mock_get_compiler.return_value.compile.return_value = b'%PDF'
        exit_code = main(['render', str(content_path), '--out', str(out), '--config', str(tmp_path / 'x.json')])

    assert exit_code == 0
    assert out.read_bytes() == b'%PDF'


def test_init_db_and_stats(tmp_path, capsys):
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps({'db_path': str(tmp_path / 'cli.db')}))

    assert main(['init-db', str(config_path)]) == 0
    assert main(['free-resume-stats', str(config_path)]) == 0
    assert 'Total generations: 0' in capsys.readouterr().out
