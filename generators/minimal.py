"""
Minimal template: single column with generous whitespace.
"""
from generators.common import (
    build_contact_link_parts, degree_line, education_dates, entries, escape_latex, fill_placeholders,
    get_full_name, itemize, load_template, non_blank, project_bullets, projects_with_content, skill_parts,
)

e = escape_latex


def _experience(exp):
    location = f"{e(exp['location'])}\\\\" if exp.get('location') else ''
    return (
        f"\\textbf{{{e(exp.get('title'))}}} at {e(exp.get('company'))} \\hfill {e(exp.get('date'))}\\\\"
        f"{location}{itemize(non_blank(exp.get('details')))}"
    )


def _project(proj):
    technologies = proj.get('technologies') or []
    tech = f" \\emph{{{e(', '.join(technologies))}}}" if technologies else ''
    return f"\\textbf{{{e(proj.get('name'))}}}{tech} \\hfill {e(proj.get('date') or '')}\\\\{itemize(project_bullets(proj))}"


def generate_minimal_latex(content):
    tex = load_template('minimal_resume.tex')
    _, _, full_name = get_full_name(content)
    links = ' \\quad $|$ \\quad '.join(build_contact_link_parts(content))

    header = f"\\begin{{center}}\n{{\\LARGE\\bfseries {e(full_name)}}}\\\\[4pt]\n\\small {links}\n\\end{{center}}"
    experience = '\\\\[10pt]\n'.join(_experience(exp) for exp in entries(content, 'experience'))
    education = '\\\\[8pt]\n'.join(
        f"\\textbf{{{e(edu.get('name'))}}}\\\\{degree_line(edu)}\\\\{education_dates(edu)}"
        for edu in entries(content, 'education')
    )
    projects = '\\\\[10pt]\n'.join(_project(proj) for proj in projects_with_content(content))
    skills = ' \\quad $|$ \\quad '.join(skill_parts(content, None, None))

    return fill_placeholders(tex, 'MINIMAL', {
        'HEADER': header,
        'EXPERIENCE': experience,
        'EDUCATION': education,
        'PROJECTS': projects,
        'SKILLS': skills,
    })
