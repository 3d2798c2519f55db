"""
Document generation: render LaTeX, compile it, and save the PDF to the user's documents.

Shared by the agent tools, the export routes and the free resume generator.
"""
import logging
import secrets

from compilers import get_compiler
from generators import generate_cover_letter_latex, generate_resume_latex
from services.document_service import save_generated_cover_letter_with_file, save_generated_resume_with_file
from services.errors import LimitReachedError
from services.usage_service import can_generate_document, document_limit_message
from utils.time_utils import format_generated_time

logger = logging.getLogger(__name__)


def _unique_id():
    return secrets.token_hex(8)


def compile_latex(latex, filename, config_dict):
    """
    Compile LaTeX with the configured backend.

    Raises:
        CompilerUnavailableError: If no compiler is configured
        LatexCompileError: If compilation fails
    """
    compiler = get_compiler(config_dict)
    logger.info(f"Compiling {filename} with the {compiler.name} compiler")
    return compiler.compile(latex, filename)


def render_resume_pdf(content, template_id, config_dict):
    """
    Render and compile a resume without saving it.

    Returns:
        tuple: (latex source, PDF bytes)
    """
    latex = generate_resume_latex(content, template_id)
    return latex, compile_latex(latex, f"resume-{_unique_id()}", config_dict)


def render_cover_letter_pdf(content, config_dict, template_id='jake'):
    latex = generate_cover_letter_latex(content, template_id)
    return latex, compile_latex(latex, f"coverletter-{_unique_id()}", config_dict)


def check_document_limit(user_id, config_dict):
    """
    Raise LimitReachedError when the user has used this month's documents.

    Args:
        user_id (int): User ID
        config_dict (dict): Configuration dictionary
    """
    check = can_generate_document(user_id, config_dict)
    if not check['allowed']:
        raise LimitReachedError(
            document_limit_message(check),
            limit=check['limit'],
            used=check['used'],
        )
    return check


def generate_resume_document(user_id, content, config_dict, template_id='jake', target_company=None):
    """
    Generate a resume PDF and auto-save it to the user's documents.

    Args:
        user_id (int): Owner
        content (dict): ResumeContent
        config_dict (dict): Configuration dictionary
        template_id (str): Resume template
        target_company (str): Company the resume targets, used in the document name

    Returns:
        dict: latex, pdf_bytes, file_name, tex_file_name and the saved resume
            (None when saving failed)

    Raises:
        CompilerUnavailableError: If no compiler is configured
        LatexCompileError: If compilation fails
    """
    info = content.get('personalInfo') or {}
    first_name = info.get('firstName') or ''
    last_name = info.get('lastName') or ''
    formatted_time = format_generated_time()

    latex, pdf_bytes = render_resume_pdf(content, template_id, config_dict)

    company_suffix = f" - {target_company}" if target_company else ''
    name = f"{first_name} {last_name} Resume{company_suffix} ({formatted_time})"
    file_name = f"resume-{first_name}-{last_name}--{formatted_time}.pdf"

    saved = None
    try:
        saved = save_generated_resume_with_file(user_id, name, pdf_bytes, file_name, content, template_id, config_dict)
        logger.info(f"Resume saved: {name}")
    except Exception as e:
        # The PDF is still returned to the caller
        logger.error(f"Failed to auto-save resume: {e}")

    return {
        'latex': latex,
        'pdf_bytes': pdf_bytes,
        'file_name': file_name,
        'tex_file_name': f"resume-{first_name}-{last_name}--{formatted_time}.tex",
        'resume': saved,
    }


def generate_cover_letter_document(user_id, content, config_dict, template_id='jake'):
    """
    Generate a cover letter PDF and auto-save it to the user's documents.

    Returns:
        dict: latex, pdf_bytes, file_name and the saved cover letter (None when saving failed)
    """
    info = content.get('personalInfo') or {}
    job = content.get('jobInfo') or {}
    first_name = info.get('firstName') or ''
    last_name = info.get('lastName') or ''
    formatted_time = format_generated_time()

    latex, pdf_bytes = render_cover_letter_pdf(content, config_dict, template_id)

    company_suffix = f" - {job['company']}" if job.get('company') else ''
    name = f"{first_name} {last_name} Cover Letter{company_suffix} ({formatted_time})"
    file_name = f"coverletter-{first_name}-{last_name}--{formatted_time}.pdf"

    saved = None
    try:
        saved = save_generated_cover_letter_with_file(
            user_id, name, pdf_bytes, file_name, content, template_id, config_dict,
            company=job.get('company'), position=job.get('position'),
        )
        logger.info(f"Cover letter saved: {name}")
    except Exception as e:
        logger.error(f"Failed to auto-save cover letter: {e}")

    return {
        'latex': latex,
        'pdf_bytes': pdf_bytes,
        'file_name': file_name,
        'tex_file_name': f"coverletter-{first_name}-{last_name}--{formatted_time}.tex",
        'cover_letter': saved,
    }
