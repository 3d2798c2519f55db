"""
Jake's resume template, the default template for generated resumes.

The template file carries "% <SECTION>_PLACEHOLDER" markers, each followed by
a section banner comment. Anything between a marker and the next banner is
cleared before the generated content is substituted in.
"""
import re

from generators.common import escape_latex, get_full_name, load_template, non_blank, personal_info

e = escape_latex

_REGIONS = [
    ('% HEADER_PLACEHOLDER', '%-----------EDUCATION-----------'),
    ('% EDUCATION_PLACEHOLDER', '%-----------EXPERIENCE-----------'),
    ('% EXPERIENCE_PLACEHOLDER', '%-----------PROJECTS-----------'),
    ('% PROJECTS_PLACEHOLDER', '%-----------TECHNICAL SKILLS-----------'),
    ('% SKILLS_PLACEHOLDER', '%-----------ADDITIONAL INFO-----------'),
    ('% ADDITIONAL_INFO_PLACEHOLDER', '\\end{document}'),
]

_SECTION_TITLES = {
    'EDUCATION': 'Education',
    'EXPERIENCE': 'Experience',
    'PROJECTS': 'Projects',
    'SKILLS': 'Skills',
    'ADDITIONAL_INFO': 'Additional Information',
}


def format_url(url):
    if not url:
        return ''
    return url if url.startswith('http') else f"https://{url}"


def _strip_protocol(url):
    return re.sub(r'^https?://', '', url)


def _clear_regions(tex):
    for marker, banner in _REGIONS:
        pattern = re.escape(marker) + r'[\s\S]*?' + re.escape(banner)
        tex = re.sub(pattern, lambda _: f"{marker}\n{banner}", tex, count=1)
    return tex


def _header(content):
    info = personal_info(content)
    first_name, last_name, _ = get_full_name(content)
    email = e(info.get('email'))

    lines = [
        "\\begin{center}",
        f"    \\textbf{{\\Huge \\scshape {e(first_name)} {e(last_name)}}} \\\\ \\vspace{{1pt}}",
        f"    \\small \\href{{mailto:{email}}}{{\\underline{{{email}}}}} $|$",
    ]
    for key in ('citizenship', 'phone', 'location'):
        if info.get(key):
            lines.append(f"    {e(info[key])} $|$")
    for key in ('linkedin', 'github', 'portfolio'):
        if info.get(key):
            url = info[key]
            separator = '' if key == 'portfolio' else ' $|$'
            lines.append(
                f"    \\href{{{e(format_url(url))}}}{{\\underline{{{e(_strip_protocol(url))}}}}}{separator}"
            )
    lines.append("  \\end{center}")
    return '\n'.join(lines)


def _item_list(details):
    if not details:
        return ''
    items = '\n          '.join(f"\\resumeItem{{{e(detail)}}}" for detail in details)
    return f"\\resumeItemListStart\n          {items}\n        \\resumeItemListEnd"


def _subheading_list(blocks):
    if not blocks:
        return ''
    return "\\resumeSubHeadingListStart\n" + '\n'.join(blocks) + "\n  \\resumeSubHeadingListEnd"


def _education(content):
    blocks = []
    for edu in content.get('education') or []:
        field = f" in {e(edu['field'])}" if edu.get('field') else ''
        if edu.get('startDate'):
            dates = f"{e(edu['startDate'])} -- {e(edu.get('endDate'))}"
        else:
            dates = f"Estimated Graduation: {e(edu.get('endDate'))}"
        blocks.append(
            "    \\resumeSubheading\n"
            f"      {{{e(edu.get('name'))}}}{{{e(edu.get('location'))}}}\n"
            f"      {{{e(edu.get('degree'))}{field}}}{{{dates}}}\n"
            f"        {_item_list(non_blank(edu.get('details')))}"
        )
    return _subheading_list(blocks)


def _experience(content):
    blocks = []
    for exp in content.get('experience') or []:
        blocks.append(
            "    \\resumeSubheading\n"
            f"      {{{e(exp.get('company'))}}}{{{e(exp.get('location'))}}}\n"
            f"      {{{e(exp.get('title'))}}}{{{e(exp.get('date'))}}}\n"
            f"        {_item_list(non_blank(exp.get('details')))}"
        )
    return _subheading_list(blocks)


def _projects(content):
    blocks = []
    for proj in content.get('projects') or []:
        technologies = proj.get('technologies') or []
        tech = f"\\resumeItem{{Technologies Used: {', '.join(e(t) for t in technologies)}}}" if technologies else ''
        blocks.append(
            "    \\resumeProjectHeader\n"
            f"      {{{e(proj.get('name'))}}}{{{e(proj.get('date'))}}}\n"
            f"    \\resumeProjectDetails{{{e(proj.get('description'))}}}\n"
            f"    {tech}\n"
            f"        {_item_list(non_blank(proj.get('details')))}"
        )
    return _subheading_list(blocks)


def _flex_line(label, values):
    if not values:
        return None
    return f"\\resumeFlexContent{{{label}}}{{{', '.join(e(value) for value in values)}}}"


def _language(lang):
    if isinstance(lang, dict):
        proficiency = lang.get('proficiency')
        name = e(lang.get('language'))
        return f"{name} ({e(proficiency)})" if proficiency else name
    return e(lang)


def _skills(content):
    skills = content.get('skills') or {}
    lines = [
        _flex_line('Technical:', skills.get('technical')),
        _flex_line('Additional:', skills.get('additional')),
    ]
    return '\n'.join(line for line in lines if line)


def _additional_info(content):
    info = content.get('additionalInfo') or {}
    languages = info.get('languages') or []
    lines = [
        _flex_line('Interests:', info.get('interests')),
        _flex_line('Hobbies:', info.get('hobbies')),
        f"\\resumeFlexContent{{Languages:}}{{{', '.join(_language(lang) for lang in languages)}}}" if languages else None,
        _flex_line('References:', info.get('references')),
    ]
    return '\n'.join(line for line in lines if line)


def generate_jake_latex(content):
    """
    Render ResumeContent with Jake's template.

    Sections without content are removed from the document.

    Args:
        content (dict): ResumeContent

    Returns:
        str: Complete LaTeX document
    """
    content = content or {}
    tex = _clear_regions(load_template('jake_resume.tex'))

    sections = {
        'EDUCATION': _education(content),
        'EXPERIENCE': _experience(content),
        'PROJECTS': _projects(content),
        'SKILLS': _skills(content),
        'ADDITIONAL_INFO': _additional_info(content),
    }
    tex = tex.replace('% HEADER_PLACEHOLDER', _header(content), 1)
    for name, value in sections.items():
        tex = tex.replace(f"% {name}_PLACEHOLDER", value, 1)

    for name, value in sections.items():
        if not value:
            title = re.escape(f"\\section{{{_SECTION_TITLES[name]}}}")
            tex = re.sub(title + r'[\s\S]*?(?=\\section|\\end\{document\})', '', tex)

    return tex.replace('\\begin{document}', '\\setlength{\\parskip}{0pt}\n\\begin{document}', 1)
