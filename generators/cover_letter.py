"""
Cover letter generation for the Jake cover letter template.
"""
import re

from generators.common import escape_latex, load_template
from utils.time_utils import format_letter_date

COVER_LETTER_TEMPLATE_FILES = {
    'jake': 'jake_cover_letter.tex',
}

_HEADER_PATTERN = re.compile(r'\\begin\{center\}[\s\S]*?\\end\{center\}')


def generate_cover_letter_latex(content, template_id='jake', now=None):
    """
    Fill the cover letter template from CoverLetterContent.

    Args:
        content (dict): personalInfo, jobInfo and letterContent
        template_id (str): Cover letter template, only "jake" exists
        now (datetime): Date to print on the letter, defaults to today

    Returns:
        str: Complete LaTeX document
    """
    tex = load_template(COVER_LETTER_TEMPLATE_FILES.get(template_id, COVER_LETTER_TEMPLATE_FILES['jake']))
    info = content.get('personalInfo') or {}
    job = content.get('jobInfo') or {}
    letter = content.get('letterContent') or {}

    full_name = f"{escape_latex(info.get('firstName'))} {escape_latex(info.get('lastName'))}"
    contact_parts = [escape_latex(info.get('email'))]
    if info.get('phone'):
        contact_parts.append(escape_latex(info['phone']))
    if info.get('location'):
        contact_parts.append(escape_latex(info['location']))
    contact_line = ' $|$ '.join(contact_parts)

    header = (
        f"\\begin{{center}}\n    \\textbf{{\\Huge \\scshape {full_name}}} \\\\ \\vspace{{1pt}}\n"
        f"    \\small {contact_line}\n\\end{{center}}"
    )
    tex = _HEADER_PATTERN.sub(lambda _: header, tex, count=1)

    hiring_manager = job.get('hiringManagerName')
    body = '\n\n'.join(escape_latex(paragraph) for paragraph in letter.get('bodyParagraphs') or [])
    replacements = [
        ('{{DATE}}', escape_latex(format_letter_date(now))),
        ('{{HIRING_MANAGER_NAME}}', escape_latex(hiring_manager or 'Hiring Manager')),
        ('{{COMPANY_NAME}}', escape_latex(job.get('company'))),
        ('{{COMPANY_ADDRESS}}', escape_latex(job.get('companyAddress'))),
        ('{{SALUTATION}}', escape_latex(hiring_manager) if hiring_manager else 'Hiring Manager'),
        ('{{OPENING_PARAGRAPH}}', escape_latex(letter.get('openingParagraph'))),
        ('{{BODY_PARAGRAPHS}}', body),
        ('{{CLOSING_PARAGRAPH}}', escape_latex(letter.get('closingParagraph'))),
        ('{{YOUR NAME}}', full_name),
    ]
    for placeholder, value in replacements:
        tex = tex.replace(placeholder, value, 1)
    return tex
