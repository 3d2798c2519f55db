"""
Text processing and formatting utilities.
"""
import re

DASH_REPLACEMENTS = {
    '‑': '-',  # Non-breaking hyphen
    '‒': '-',  # Figure dash
    '–': '-',  # En dash
    '—': '-',  # Em dash
    '―': '-',  # Horizontal bar
    '−': '-',  # Minus sign
    '﹘': '-',  # Small em dash
    '﹣': '-',  # Small hyphen-minus
    '－': '-',  # Full-width hyphen-minus
}


def normalize_dashes_for_docx(text):
    """
    Convert all Unicode dash variants to regular hyphens for DOCX.

    Args:
        text (str): Text to normalize

    Returns:
        str: Text with all Unicode dashes converted to ASCII hyphens
    """
    if not text:
        return ""
    for unicode_char, replacement in DASH_REPLACEMENTS.items():
        text = text.replace(unicode_char, replacement)
    return text


def escape_xml_text(text):
    """
    Escape special characters for XML/HTML (used by ReportLab Paragraph).

    Args:
        text (str): Text to escape

    Returns:
        str: Escaped text with Unicode dashes normalized to ASCII hyphens
    """
    if not text:
        return ""
    text = normalize_dashes_for_docx(text)
    # & first
    text = text.replace('&', '&amp;')
    text = text.replace('<', '&lt;')
    text = text.replace('>', '&gt;')
    text = text.replace('"', '&quot;')
    text = text.replace("'", '&apos;')
    return text


def post_process_paragraph(text):
    """
    Clean a generated paragraph: normalize dashes, fix "90 %" spacing,
    drop leading bullet markers and collapse whitespace.

    Args:
        text (str): Paragraph text

    Returns:
        str: Cleaned paragraph
    """
    if not text:
        return ""
    text = normalize_dashes_for_docx(text)
    text = re.sub(r'(\d+)\s+%', r'\1%', text)
    text = re.sub(r'^\s*[•·*-]\s*', '', text)
    return re.sub(r'\s+', ' ', text).strip()


def cover_letter_paragraphs(content):
    """
    Flatten structured cover letter content into display paragraphs.

    Args:
        content (dict): Cover letter content with personalInfo, jobInfo and letterContent

    Returns:
        list: Paragraph strings in reading order (salutation through signature)
    """
    job_info = content.get('jobInfo') or {}
    letter = content.get('letterContent') or {}
    personal = content.get('personalInfo') or {}

    paragraphs = [f"Dear {job_info.get('hiringManagerName') or 'Hiring Manager'},"]
    for para in [letter.get('openingParagraph')] + list(letter.get('bodyParagraphs') or []) + [letter.get('closingParagraph')]:
        cleaned = post_process_paragraph(para)
        if cleaned:
            paragraphs.append(cleaned)
    name = f"{personal.get('firstName', '')} {personal.get('lastName', '')}".strip()
    paragraphs.append(f"Sincerely,\n{name}" if name else "Sincerely,")
    return paragraphs

