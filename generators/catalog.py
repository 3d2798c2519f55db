"""
Resume and cover letter template catalog.
"""
from dataclasses import asdict, dataclass, field


@dataclass
class Template:
    id: str
    name: str
    description: str
    tags: list = field(default_factory=list)
    features: list = field(default_factory=list)
    free_resume_eligible: bool = False

    def to_dict(self):
        return asdict(self)


RESUME_TEMPLATES = [
    Template(
        id='jake',
        name='JobKompass Jake',
        description='A clean, ATS-optimized professional resume template. Perfect for tech roles with clear '
                    'section hierarchy and modern typography.',
        tags=['ATS-Friendly', 'Professional', 'Tech'],
        features=['Optimized for ATS systems', 'Clean section hierarchy', 'Modern typography', 'Tech-focused layout'],
        free_resume_eligible=True,
    ),
    Template(
        id='vertex',
        name='Vertex',
        description='Clean single-column layout with accent headers. Professional and modern. '
                    'Great for tech and creative roles.',
        tags=['Professional', 'Clean', 'Modern'],
        features=['Single-column layout', 'Accent section headers', 'No blank page issues', 'Tech & design'],
        free_resume_eligible=True,
    ),
    Template(
        id='minimal',
        name='Minimal',
        description='Ultra-clean single column with generous whitespace. Elegant and understated. '
                    'Ideal for design, product, and senior roles.',
        tags=['Clean', 'Elegant', 'Whitespace'],
        features=['Minimalist design', 'Easy to scan', 'Design-focused', 'Executive-ready'],
        free_resume_eligible=True,
    ),
    Template(
        id='executive',
        name='Executive',
        description='Traditional serif typography with conservative structure. '
                    'Timeless format for finance, law, and C-suite positions.',
        tags=['Traditional', 'Serif', 'Formal'],
        features=['Classic typography', 'Conservative layout', 'Finance & law', 'Senior leadership'],
        free_resume_eligible=True,
    ),
    Template(
        id='momentum',
        name='Momentum',
        description='Modern single column with blue accent bars. Startup-friendly and energetic. '
                    'Great for product, growth, and tech roles.',
        tags=['Modern', 'Accent Bars', 'Startup'],
        features=['Bold section headers', 'High-energy design', 'Product & growth', 'Tech startups'],
        free_resume_eligible=True,
    ),
]

COVER_LETTER_TEMPLATES = [
    Template(
        id='jake',
        name='JobKompass Jake',
        description='A matching cover letter template that pairs perfectly with the Jake resume. '
                    'Clean formatting with professional structure.',
        tags=['Professional', 'Matching', 'Clean'],
        features=['Matches Jake resume', 'Professional tone', 'Clear structure', 'ATS-compatible'],
    ),
]

DEFAULT_RESUME_TEMPLATE_ID = 'jake'
DEFAULT_COVER_LETTER_TEMPLATE_ID = 'jake'


def get_resume_template(template_id):
    return next((t for t in RESUME_TEMPLATES if t.id == template_id), None)


def get_cover_letter_template(template_id):
    return next((t for t in COVER_LETTER_TEMPLATES if t.id == template_id), None)


def is_valid_cover_letter_template_id(template_id):
    return get_cover_letter_template(template_id) is not None


def get_free_resume_templates():
    """Templates offered by the free resume generator. Only Jake for now."""
    return [t for t in RESUME_TEMPLATES if t.id == 'jake']


def get_app_resume_template_options():
    """Templates offered as choices inside the app. Only Jake for now."""
    return [t for t in RESUME_TEMPLATES if t.id == 'jake']


def catalog_dict():
    return {
        'resume': [t.to_dict() for t in RESUME_TEMPLATES],
        'cover_letter': [t.to_dict() for t in COVER_LETTER_TEMPLATES],
        'free_resume': [t.id for t in get_free_resume_templates()],
        'app_resume_options': [t.id for t in get_app_resume_template_options()],
    }
