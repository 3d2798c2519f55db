"""
PDF processing utilities.
"""
import base64
import io
import re

from pdfminer.high_level import extract_text

_DATA_URL_PREFIX = re.compile(r'^data:application/pdf;base64,')


def strip_pdf_data_url(pdf_b64):
    """Drop a `data:application/pdf;base64,` prefix if present."""
    return _DATA_URL_PREFIX.sub('', pdf_b64 or '')


def estimate_base64_size(pdf_b64):
    """Decoded size in bytes of a base64 PDF payload, without decoding it."""
    return int(len(strip_pdf_data_url(pdf_b64)) * 3 / 4)


def read_pdf_base64(pdf_b64):
    """
    Extract text from a base64 encoded PDF.

    Args:
        pdf_b64 (str): Base64 payload, optionally a data URL

    Returns:
        str: Extracted text

    Raises:
        ValueError: If the payload is not valid base64 or not a readable PDF
    """
    try:
        pdf_bytes = base64.b64decode(strip_pdf_data_url(pdf_b64), validate=True)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid PDF payload: {e}")
    try:
        return extract_text(io.BytesIO(pdf_bytes))
    except Exception as e:
        raise ValueError(f"Could not read PDF: {e}")
