"""
Executive template: serif typography, conservative structure.
"""
from generators.common import (
    build_contact_link_parts, degree_line, education_dates, entries, escape_latex, fill_placeholders,
    get_full_name, itemize, load_template, non_blank, project_bullets, projects_with_content, skill_parts,
)

e = escape_latex


def _experience(exp):
    location = f"{e(exp['location'])}\\\\" if exp.get('location') else ''
    return (
        f"\\textbf{{{e(exp.get('title'))}}}, {e(exp.get('company'))} \\hfill {e(exp.get('date'))}\\\\"
        f"{location}{itemize(non_blank(exp.get('details')))}"
    )


def _project(proj):
    # Executive projects omit the technology list
    return f"\\textbf{{{e(proj.get('name'))}}} \\hfill {e(proj.get('date') or '')}\\\\{itemize(project_bullets(proj))}"


def generate_executive_latex(content):
    tex = load_template('executive_resume.tex')
    _, _, full_name = get_full_name(content)
    links = ' \\quad $|$ \\quad '.join(build_contact_link_parts(content))

    header = f"{{\\Large\\bfseries\\scshape {e(full_name)}}}\\\\[6pt]\n\\small {links}"
    experience = '\\\\[14pt]\n'.join(_experience(exp) for exp in entries(content, 'experience'))
    education = '\\\\[10pt]\n'.join(
        f"\\textbf{{{e(edu.get('name'))}}}\\\\{degree_line(edu)}\\\\{education_dates(edu)}"
        for edu in entries(content, 'education')
    )
    projects = '\\\\[14pt]\n'.join(_project(proj) for proj in projects_with_content(content))
    skills = ' \\\\[6pt]\n'.join(skill_parts(content, 'Technical:', 'Additional:'))

    return fill_placeholders(tex, 'EXEC', {
        'HEADER': header,
        'EXPERIENCE': experience,
        'EDUCATION': education,
        'PROJECTS': projects,
        'SKILLS': skills,
    })
