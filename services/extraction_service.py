"""
Resume extraction: turn pasted text or an uploaded PDF into ResumeContent JSON.
"""
import logging

from services.errors import JobKompassError, ValidationError
from utils.openrouter_utils import call_openrouter, extract_json_payload
from utils.pdf_utils import read_pdf_base64

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = """You are a resume parsing expert. Extract all information from the provided resume text and output a valid JSON object that matches this exact structure. Return ONLY valid JSON, no markdown or extra text.

Structure (ResumeContentForJake):
{
  "personalInfo": {
    "firstName": "string",
    "lastName": "string",
    "email": "string",
    "location": "string or null",
    "linkedin": "string or null",
    "github": "string or null",
    "portfolio": "string or null",
    "citizenship": "string or null"
  },
  "experience": [
    {
      "company": "string",
      "title": "string",
      "location": "string or null",
      "date": "string (e.g. 'Jan 2020 - Present' or 'Jun 2018 - Dec 2019')",
      "details": ["bullet point 1", "bullet point 2"]
    }
  ],
  "education": [
    {
      "name": "school name",
      "degree": "e.g. Bachelor of Science",
      "field": "e.g. Computer Science or null",
      "location": "string or null",
      "startDate": "e.g. Aug 2016 or null",
      "endDate": "e.g. May 2020 or Present",
      "details": ["GPA: 3.8", "honors", "etc"] or []
    }
  ],
  "projects": [
    {
      "name": "project name",
      "description": "brief description",
      "date": "string or null",
      "technologies": ["tech1", "tech2"] or null,
      "details": ["additional bullet"] or null
    }
  ] or null,
  "skills": {
    "technical": ["skill1", "skill2"],
    "additional": ["soft skill 1"] or null
  } or null,
  "additionalInfo": {
    "languages": [{"language": "English", "proficiency": "Native"}] or null,
    "interests": ["interest1"] or null
  } or null
}

Rules:
- Extract everything you can find. Use empty strings or null for missing optional fields.
- personalInfo.firstName, lastName, email are required - infer from content.
- For experience/education dates, use human-readable format like "Jan 2020 - Present".
- All arrays use [] if empty, not null (except optional top-level like projects, skills).
- Extract bullet points into details arrays.
- For skills, put programming languages/tools in technical, soft skills in additional.
- CRITICAL: Never include empty, blank, or whitespace-only items in any details arrays. Each bullet must have real content. Omit any bullet that would be empty. Do not add placeholder bullets."""


class ResumeExtractionError(JobKompassError):
    status_code = 502


def _non_blank(items):
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, str) and item.strip()]


def normalize_extracted_content(parsed, fallback_email=None):
    """
    Fill in the parts of an extracted resume the model left out.

    Args:
        parsed (dict): Model output
        fallback_email (str): Email to use when none was extracted

    Returns:
        dict: ResumeContent with required keys present and blank bullets removed
    """
    if not parsed.get('personalInfo'):
        parsed['personalInfo'] = {'email': fallback_email or '', 'firstName': '', 'lastName': ''}
    if not parsed['personalInfo'].get('email') and fallback_email:
        parsed['personalInfo']['email'] = fallback_email
    parsed['experience'] = parsed.get('experience') or []
    parsed['education'] = parsed.get('education') or []
    parsed['projects'] = parsed.get('projects') or None
    parsed['skills'] = parsed.get('skills') or {'technical': [], 'additional': None}
    if not isinstance(parsed['skills'].get('technical'), list):
        parsed['skills']['technical'] = []

    sections = parsed['experience'] + parsed['education'] + (parsed['projects'] or [])
    for entry in sections:
        if entry.get('details'):
            entry['details'] = _non_blank(entry['details'])
    return parsed


def extract_resume_content(config_dict, resume_text=None, resume_pdf_b64=None, fallback_email=None):
    """
    Extract structured resume content with the OpenRouter models.

    PDF uploads are converted to text locally before the model call.

    Args:
        config_dict (dict): Configuration dictionary
        resume_text (str): Pasted resume text
        resume_pdf_b64 (str): Base64 PDF, optionally a data URL
        fallback_email (str): Email to use when none was extracted

    Returns:
        dict: Normalized ResumeContent

    Raises:
        ValidationError: If neither input is usable
        JobKompassError: If OpenRouter is not configured
        OpenRouterError: If the model call fails
        ResumeExtractionError: If the model answer is not valid JSON
    """
    has_text = isinstance(resume_text, str) and resume_text.strip()
    has_pdf = isinstance(resume_pdf_b64, str) and resume_pdf_b64
    if not has_text and not has_pdf:
        raise ValidationError("Please provide resume text or PDF")
    if not config_dict.get('openrouter_api_key'):
        raise JobKompassError("OpenRouter not configured")

    if has_pdf:
        try:
            text = read_pdf_base64(resume_pdf_b64)
        except ValueError as e:
            raise ValidationError(str(e))
        if not text.strip():
            raise ValidationError("Could not read any text from the PDF")
    else:
        text = resume_text

    content, model_used = call_openrouter(
        [
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": f"Extract and format this resume:\n\n{text.strip()}"},
        ],
        config_dict['openrouter_api_key'],
        config_dict['openrouter_models'],
        temperature=0.2,
        max_tokens=4096,
        referer=config_dict['app_url'],
    )
    logger.info(f"Resume extracted with {model_used}")

    try:
        parsed = extract_json_payload(content)
    except ValueError:
        raise ResumeExtractionError("Failed to parse extracted resume data")
    if not isinstance(parsed, dict):
        raise ResumeExtractionError("Failed to parse extracted resume data")
    return normalize_extracted_content(parsed, fallback_email)
