"""
LaTeX generators: ResumeContent and CoverLetterContent to .tex source.
"""
from generators.cover_letter import generate_cover_letter_latex
from generators.executive import generate_executive_latex
from generators.jake import generate_jake_latex
from generators.minimal import generate_minimal_latex
from generators.momentum import generate_momentum_latex
from generators.vertex import generate_vertex_latex

RESUME_TEMPLATE_IDS = ('jake', 'vertex', 'minimal', 'executive', 'momentum')

_GENERATORS = {
    'jake': generate_jake_latex,
    'vertex': generate_vertex_latex,
    'minimal': generate_minimal_latex,
    'executive': generate_executive_latex,
    'momentum': generate_momentum_latex,
}


def generate_resume_latex(content, template_id):
    """
    Render a resume with the given template.

    "apex" was renamed to "vertex" and is still accepted. Unknown ids use Jake.
    """
    resolved = 'vertex' if template_id == 'apex' else template_id
    return _GENERATORS.get(resolved, generate_jake_latex)(content)


def is_valid_resume_template_id(template_id):
    return template_id in RESUME_TEMPLATE_IDS


__all__ = [
    'RESUME_TEMPLATE_IDS',
    'generate_cover_letter_latex',
    'generate_resume_latex',
    'is_valid_resume_template_id',
]
