"""
Vertex template: two-tone headings with custom subheading macros.
"""
from generators.common import (
    build_contact_link_parts, degree_line, education_dates, entries, escape_latex, fill_placeholders,
    get_full_name, load_template, non_blank, project_bullets, projects_with_content, skill_parts,
)

e = escape_latex


def _item_list(bullets):
    if not bullets:
        return ''
    items = '\n'.join(f"      \\vertexItem{{{e(bullet)}}}" for bullet in bullets)
    return f"\n    \\vertexItemListStart\n{items}\n    \\vertexItemListEnd"


def _experience(exp):
    return (
        f"    \\vertexSubheading\n"
        f"      {{{e(exp.get('title'))}}}{{{e(exp.get('date'))}}}\n"
        f"      {{{e(exp.get('company'))}}}{{{e(exp.get('location'))}}}"
        f"{_item_list(non_blank(exp.get('details')))}"
    )


def _education(edu):
    return (
        f"    \\vertexSubheading\n"
        f"      {{{e(edu.get('name'))}}}{{{e(edu.get('location'))}}}\n"
        f"      {{{degree_line(edu)}}}{{{education_dates(edu)}}}"
    )


def _project(proj):
    technologies = proj.get('technologies') or []
    tech = f" $|$ \\emph{{{e(', '.join(technologies))}}}" if technologies else ''
    return (
        f"    \\vertexProjectHeading\n"
        f"      {{\\textbf{{{e(proj.get('name'))}}}{tech}}}{{{e(proj.get('date'))}}}"
        f"{_item_list(project_bullets(proj))}"
    )


def generate_vertex_latex(content):
    """
    Render ResumeContent with the Vertex template.

    Args:
        content (dict): ResumeContent

    Returns:
        str: Complete LaTeX document
    """
    tex = load_template('vertex_resume.tex')
    _, _, full_name = get_full_name(content)

    header = f"\\textbf{{\\Huge \\scshape {e(full_name)}}}\\\\[4pt]\n\\small " + ' $|$ '.join(
        build_contact_link_parts(content)
    )
    experience = '\n'.join(_experience(exp) for exp in entries(content, 'experience')) or '    % No experience'
    education = '\n'.join(_education(edu) for edu in entries(content, 'education')) or '    % No education'
    projects = '\n'.join(_project(proj) for proj in projects_with_content(content)) or '    % No projects'
    skills = ' \\quad $|$ \\quad '.join(skill_parts(content, 'Tech:', 'Other:'))

    return fill_placeholders(tex, 'VERTEX', {
        'HEADER': header,
        'EXPERIENCE': experience,
        'EDUCATION': education,
        'PROJECTS': projects,
        'SKILLS': skills,
    })
