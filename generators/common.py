"""
Shared helpers for the LaTeX resume generators.
"""
import os
import re

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')

_LATEX_ESCAPES = [
    ('&', '\\&'),
    ('%', '\\%'),
    ('$', '\\$'),
    ('#', '\\#'),
    ('_', '\\_'),
    ('{', '\\{'),
    ('}', '\\}'),
    ('~', '\\textasciitilde{}'),
    ('^', '\\textasciicircum{}'),
]


def escape_latex(text):
    """
    Escape LaTeX special characters.

    Args:
        text (str): Raw text, may be None

    Returns:
        str: Text safe to place inside a LaTeX document
    """
    if not text:
        return ''
    text = str(text)
    # \textbackslash{} contains braces, so protect it from the brace escapes
    text = text.replace('\\', '\x00')
    for char, replacement in _LATEX_ESCAPES:
        text = text.replace(char, replacement)
    return text.replace('\x00', '\\textbackslash{}')


def load_template(file_name):
    path = os.path.join(TEMPLATES_DIR, file_name)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Template not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def personal_info(content):
    return (content or {}).get('personalInfo') or {}


def get_full_name(content):
    """
    Resolve the candidate's name.

    Returns:
        tuple: (first_name, last_name, full_name)
    """
    info = personal_info(content)
    first_name = info.get('firstName') or ''
    last_name = info.get('lastName') or ''
    if not first_name and not last_name and info.get('name'):
        parts = info['name'].split(' ')
        first_name = parts[0] or ''
        last_name = ' '.join(parts[1:])
    return first_name, last_name, f"{first_name} {last_name}".strip()


def build_contact_link_parts(content):
    """
    Contact line parts showing real URLs (linkedin.com/in/x, github.com/x, ...).

    Args:
        content (dict): ResumeContent

    Returns:
        list: LaTeX snippets, joined by each template with its own separator
    """
    info = personal_info(content)
    email = escape_latex(info.get('email'))
    parts = [f"\\href{{mailto:{email}}}{{{email}}}"]
    if info.get('location'):
        parts.append(escape_latex(info['location']))
    if info.get('linkedin'):
        handle = re.sub(r'^https?://(www\.)?linkedin\.com/in/', '', info['linkedin'], flags=re.IGNORECASE)
        handle = re.sub(r'^linkedin\.com/in/', '', handle, flags=re.IGNORECASE)
        handle = escape_latex(re.sub(r'/$', '', handle))
        parts.append(f"\\href{{https://linkedin.com/in/{handle}}}{{linkedin.com/in/{handle}}}")
    if info.get('github'):
        handle = re.sub(r'^https?://(www\.)?github\.com/', '', info['github'], flags=re.IGNORECASE)
        handle = re.sub(r'^github\.com/', '', handle, flags=re.IGNORECASE)
        handle = escape_latex(re.sub(r'/$', '', handle))
        parts.append(f"\\href{{https://github.com/{handle}}}{{github.com/{handle}}}")
    if info.get('portfolio'):
        url = info['portfolio'].strip()
        if not re.match(r'^https?://', url, re.IGNORECASE):
            url = 'https://' + url
        display = re.sub(r'/$', '', re.sub(r'^https?://(www\.)?', '', url, flags=re.IGNORECASE))
        parts.append(f"\\href{{{escape_latex(url)}}}{{{escape_latex(display)}}}")
    return parts


def non_blank(items):
    return [item for item in (items or []) if isinstance(item, str) and item.strip()]


def entries(content, section):
    value = (content or {}).get(section)
    return value if isinstance(value, list) else []


def projects_with_content(content):
    """Projects that have a description or at least one non-blank detail."""
    return [
        project for project in entries(content, 'projects')
        if (project.get('description') or '').strip() or non_blank(project.get('details'))
    ]


def project_bullets(project):
    """Description first, then details, blanks dropped."""
    return non_blank([(project.get('description') or '').strip()] + non_blank(project.get('details')))


def itemize(bullets):
    """Compact itemize block, or '' for no bullets."""
    if not bullets:
        return ''
    items = '\n'.join(f"\\item {escape_latex(bullet)}" for bullet in bullets)
    return f"\n\\begin{{itemize}}[leftmargin=*, nosep]\n{items}\n\\end{{itemize}}"


def degree_line(education):
    field = education.get('field')
    return f"{escape_latex(education.get('degree'))}{f' in {escape_latex(field)}' if field else ''}"


def education_dates(education):
    end_date = escape_latex(education.get('endDate'))
    if education.get('startDate'):
        return f"{escape_latex(education['startDate'])} -- {end_date}"
    return end_date


def skill_parts(content, technical_label, additional_label):
    """Labelled skill lines; a None label renders the list without a label."""
    skills = (content or {}).get('skills') or {}
    parts = []
    for label, key in ((technical_label, 'technical'), (additional_label, 'additional')):
        values = skills.get(key) or []
        if values:
            joined = escape_latex(', '.join(values))
            parts.append(f"\\textbf{{{label}}} {joined}" if label else joined)
    return parts


def fill_placeholders(tex, prefix, sections):
    """
    Substitute XXX<PREFIX><SECTION>XXX markers.

    Args:
        tex (str): Template source
        prefix (str): Template marker prefix, e.g. "VERTEX"
        sections (dict): Section name (HEADER, EXPERIENCE, ...) -> LaTeX

    Returns:
        str: Filled template
    """
    for name, value in sections.items():
        tex = tex.replace(f"XXX{prefix}{name}XXX", value, 1)
    return tex
