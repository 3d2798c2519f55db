"""
Resume and cover letter export routes blueprint.
"""
import io
import logging
from datetime import datetime

from flask import Blueprint, jsonify, Response, request, current_app
from docx import Document
from docx.shared import Pt
from docx.enum.text import WD_ALIGN_PARAGRAPH
from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_LEFT

from compilers import CompilerUnavailableError, LatexCompileError, build_pdf_filename
from generators import RESUME_TEMPLATE_IDS, generate_resume_latex, is_valid_resume_template_id
from services.generation_service import render_cover_letter_pdf, render_resume_pdf
from utils.auth_utils import login_required
from utils.text_utils import cover_letter_paragraphs, escape_xml_text, normalize_dashes_for_docx

logger = logging.getLogger(__name__)

# Create blueprint
export_bp = Blueprint('export', __name__)


def _pdf_response(pdf_bytes, filename):
    return Response(
        pdf_bytes,
        mimetype='application/pdf',
        headers={
            'Content-Disposition': f'attachment; filename="{filename}"'
        }
    )


def _invalid_template(template_id):
    return jsonify({
        "error": f"Invalid template: {template_id}. Valid: {', '.join(RESUME_TEMPLATE_IDS)}"
    }), 400


def _names(content):
    info = content.get('personalInfo') or {}
    return info.get('firstName'), info.get('lastName')


def _export_resume(template_id, content):
    if not is_valid_resume_template_id(template_id):
        return _invalid_template(template_id)
    if not isinstance(content, dict):
        return jsonify({"error": "Missing resume content"}), 400

    config = current_app.config['CONFIG']
    try:
        _, pdf_bytes = render_resume_pdf(content, template_id, config)
    except CompilerUnavailableError as e:
        return jsonify({"error": str(e)}), 503
    except LatexCompileError as e:
        logger.error(f"Resume export failed: {e}")
        return jsonify({"error": str(e), "log": e.log}), 500

    first_name, last_name = _names(content)
    return _pdf_response(pdf_bytes, build_pdf_filename(first_name, last_name, 'resume'))


@export_bp.route('/api/resume/export/<template_id>', methods=['POST'])
@login_required
def export_resume(template_id):
    """Compile a resume with the given template and return the PDF"""
    data = request.get_json(silent=True) or {}
    return _export_resume(template_id, data.get('content'))


@export_bp.route('/api/resume/export', methods=['POST'])
@login_required
def export_resume_default():
    data = request.get_json(silent=True) or {}
    return _export_resume(data.get('template') or 'jake', data.get('content'))


@export_bp.route('/api/resume/latex/<template_id>', methods=['GET', 'POST'])
@login_required
def get_resume_latex(template_id):
    """Get the LaTeX source for a resume without compiling it"""
    if not is_valid_resume_template_id(template_id):
        return _invalid_template(template_id)
    data = request.get_json(silent=True) or {}
    content = data.get('content')
    if not isinstance(content, dict):
        return jsonify({"error": "Missing resume content"}), 400
    return jsonify({"latex": generate_resume_latex(content, template_id)})


@export_bp.route('/api/coverletter/export/jake', methods=['POST'])
@login_required
def export_cover_letter():
    """Compile a cover letter with the Jake template and return the PDF"""
    config = current_app.config['CONFIG']
    data = request.get_json(silent=True) or {}
    content = data.get('content')
    if not isinstance(content, dict):
        return jsonify({"error": "Missing cover letter content"}), 400

    try:
        _, pdf_bytes = render_cover_letter_pdf(content, config)
    except CompilerUnavailableError as e:
        return jsonify({"error": str(e)}), 503
    except LatexCompileError as e:
        logger.error(f"Cover letter export failed: {e}")
        return jsonify({"error": str(e), "log": e.log}), 500

    first_name, last_name = _names(content)
    return _pdf_response(pdf_bytes, build_pdf_filename(first_name, last_name, 'cover-letter'))


def _plain_filename(content, extension):
    job = content.get('jobInfo') or {}
    filename = (
        f"Cover_Letter_{job.get('company', '')}_{job.get('position', '')}_"
        f"{datetime.now().strftime('%Y%m%d')}.{extension}"
    )
    return filename.replace(' ', '_').replace('/', '_')


@export_bp.route('/api/coverletter/export/docx', methods=['POST'])
@login_required
def export_cover_letter_docx():
    """Generate DOCX of cover letter"""
    data = request.get_json(silent=True) or {}
    content = data.get('content')
    if not isinstance(content, dict):
        return jsonify({"error": "Missing cover letter content"}), 400

    doc = Document()

    # Set default font
    style = doc.styles['Normal']
    font = style.font
    font.name = 'Calibri'
    font.size = Pt(11)

    for para in cover_letter_paragraphs(content):
        p = doc.add_paragraph(normalize_dashes_for_docx(para))
        p.alignment = WD_ALIGN_PARAGRAPH.LEFT
        p.paragraph_format.space_after = Pt(12)

    buffer = io.BytesIO()
    doc.save(buffer)
    buffer.seek(0)

    return Response(
        buffer.getvalue(),
        mimetype='application/vnd.openxmlformats-officedocument.wordprocessingml.document',
        headers={
            'Content-Disposition': f'attachment; filename="{_plain_filename(content, "docx")}"'
        }
    )


@export_bp.route('/api/coverletter/export/plain-pdf', methods=['POST'])
@login_required
def export_cover_letter_plain_pdf():
    """Generate a PDF of the cover letter without LaTeX"""
    data = request.get_json(silent=True) or {}
    content = data.get('content')
    if not isinstance(content, dict):
        return jsonify({"error": "Missing cover letter content"}), 400

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter,
                            rightMargin=72, leftMargin=72,
                            topMargin=72, bottomMargin=18)

    styles = getSampleStyleSheet()
    normal_style = ParagraphStyle(
        'CoverLetterNormal',
        parent=styles['Normal'],
        fontSize=11,
        leading=14,
        alignment=TA_LEFT,
        spaceAfter=12
    )

    elements = []
    for para in cover_letter_paragraphs(content):
        # Line breaks inside a paragraph (the signature) become <br/>
        escaped = escape_xml_text(para).replace('\n', '<br/>')
        elements.append(Paragraph(escaped, normal_style))
        elements.append(Spacer(1, 6))

    doc.build(elements)
    buffer.seek(0)

    return Response(
        buffer.getvalue(),
        mimetype='application/pdf',
        headers={
            'Content-Disposition': f'attachment; filename="{_plain_filename(content, "pdf")}"'
        }
    )
