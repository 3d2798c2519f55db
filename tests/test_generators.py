"""
Tests for the LaTeX resume and cover letter generators.
"""

from datetime import datetime

import pytest

from generators import RESUME_TEMPLATE_IDS, generate_cover_letter_latex, generate_resume_latex
from generators.catalog import catalog_dict, get_free_resume_templates
from generators.common import escape_latex
from generators.jake import format_url, generate_jake_latex


class TestEscapeLatex:

    def test_special_characters_are_escaped(self):
        assert escape_latex('R&D 100% $5 #1 a_b') == 'R\\&D 100\\% \\$5 \\#1 a\\_b'

    def test_braces_and_accents(self):
        assert escape_latex('{x}') == '\\{x\\}'
        assert escape_latex('~^') == '\\textasciitilde{}\\textasciicircum{}'

    def test_backslash_is_not_double_escaped(self):
        assert escape_latex('C:\\temp') == 'C:\\textbackslash{}temp'

    def test_empty_values(self):
        assert escape_latex(None) == ''
        assert escape_latex('') == ''


class TestJakeTemplate:

    def test_header_and_sections(self, sample_resume_content):
        tex = generate_jake_latex(sample_resume_content)

        assert '\\begin{document}' in tex
        assert 'Ada Lovelace' in tex
        assert '\\href{mailto:ada@example.com}' in tex
        assert 'Analytical Engines \\& Co' in tex
        assert 'Cut runtime by 50\\%' in tex
        assert '\\section{Experience}' in tex
        assert '\\section{Education}' in tex

    def test_empty_sections_are_removed(self, sample_resume_content):
        tex = generate_jake_latex(sample_resume_content)

        assert '\\section{Projects}' not in tex
        assert '\\section{Additional Information}' not in tex

    def test_links_get_a_protocol(self, sample_resume_content):
        tex = generate_jake_latex(sample_resume_content)

        assert '\\href{https://linkedin.com/in/ada}{\\underline{linkedin.com/in/ada}}' in tex
        assert format_url('example.com') == 'https://example.com'
        assert format_url('http://example.com') == 'http://example.com'


class TestTemplateRegistry:

    @pytest.mark.parametrize('template_id', RESUME_TEMPLATE_IDS)
    def test_every_template_renders_a_document(self, template_id, sample_resume_content):
        tex = generate_resume_latex(sample_resume_content, template_id)

        assert '\\begin{document}' in tex
        assert '\\end{document}' in tex
        assert 'Lovelace' in tex

    def test_apex_is_an_alias_for_vertex(self, sample_resume_content):
        assert (generate_resume_latex(sample_resume_content, 'apex')
                == generate_resume_latex(sample_resume_content, 'vertex'))

    def test_catalog_lists_free_templates(self):
        catalog = catalog_dict()

        assert [t.id for t in get_free_resume_templates()] == ['jake']
        assert catalog['free_resume'] == ['jake']


class TestCoverLetter:

    def test_placeholders_are_filled(self, sample_cover_letter_content):
        tex = generate_cover_letter_latex(sample_cover_letter_content, now=datetime(2024, 3, 5))

        assert '{{' not in tex
        assert 'Jane Doe' in tex
        assert 'Acme' in tex
        assert 'I am excited to apply.' in tex
        assert 'I built things.\n\nI shipped things.' in tex
        assert 'Ada Lovelace' in tex

    def test_missing_hiring_manager(self, sample_cover_letter_content):
        sample_cover_letter_content['jobInfo'].pop('hiringManagerName')

        tex = generate_cover_letter_latex(sample_cover_letter_content, now=datetime(2024, 3, 5))

        assert 'Hiring Manager' in tex
