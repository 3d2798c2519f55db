"""
Browser extension service layer: API keys and saving jobs from listing pages.
"""
import logging
import re
import secrets

import requests

from services.errors import LimitReachedError
from services.job_service import add_job
from services.usage_service import can_add_job, job_limit_message
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict
from utils.openrouter_utils import OpenRouterError, call_openrouter, extract_json_payload
from utils.time_utils import now_ms

logger = logging.getLogger(__name__)

KEY_PREFIX = 'jk_'
KEY_ALPHABET = 'abcdefghijklmnopqrstuvwxyz0123456789'
KEY_LENGTH = 32

MAX_PAGE_CHARS = 12000
FALLBACK_DESCRIPTION_CHARS = 500
MAX_SKILLS = 10
MAX_KEYWORDS = 8

JOB_PAGE_PARSE_PROMPT = """You are a job listing parser. Extract structured information from the following webpage text that contains a job listing.

Return a JSON object with these fields:
- company: string (the company name)
- title: string (the job title/position)
- compensation: string or null (salary range if mentioned, e.g. "$100k-$150k")
- location: string or null (job location, include remote if mentioned)
- description: string (a concise 2-3 sentence summary of the role)
- skills: string[] (key skills/requirements, max 10)
- keywords: string[] (relevant keywords for this job, max 8)

If you cannot determine a field, use null for optional fields or "Unknown" for required string fields.
Respond with ONLY valid JSON, no explanation or markdown."""


def _new_key():
    return KEY_PREFIX + ''.join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_LENGTH))


def generate_api_key(user_id, config_dict):
    """
    Issue a new extension API key, revoking any previous ones.

    Args:
        user_id (int): Owner
        config_dict (dict): Configuration dictionary

    Returns:
        str: The new key (only shown once in full)
    """
    api_key = _new_key()
    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("UPDATE extension_api_keys SET is_active = 0 WHERE user_id = ?", (user_id,))
        cursor.execute("""
            INSERT INTO extension_api_keys (user_id, key, is_active, created_at, last_used_at)
            VALUES (?, ?, 1, ?, ?)
        """, (user_id, api_key, timestamp, timestamp))
        conn.commit()
        return api_key
    finally:
        close_db_connection(conn)


def mask_key(api_key):
    return f"{api_key[:7]}{'*' * (len(api_key) - 7)}"


def get_api_key(user_id, config_dict):
    """Active key metadata with the key masked, or None."""
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "SELECT * FROM extension_api_keys WHERE user_id = ? AND is_active = 1 ORDER BY created_at DESC LIMIT 1",
            (user_id,),
        )
        record = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if record is None:
        return None
    return {
        'key': mask_key(record['key']),
        'created_at': record['created_at'],
        'last_used_at': record['last_used_at'],
    }


def revoke_api_key(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("UPDATE extension_api_keys SET is_active = 0 WHERE user_id = ? AND is_active = 1", (user_id,))
        conn.commit()
        return {'success': True}
    finally:
        close_db_connection(conn)


def lookup_by_key(api_key, config_dict):
    """Active key record ({id, user_id}) for a presented key, or None."""
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT id, user_id, is_active FROM extension_api_keys WHERE key = ?", (api_key,))
        record = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if record is None or not record['is_active']:
        return None
    return {'id': record['id'], 'user_id': record['user_id']}


def mark_used(key_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("UPDATE extension_api_keys SET last_used_at = ? WHERE id = ?", (now_ms(), key_id))
        conn.commit()
    finally:
        close_db_connection(conn)


def company_from_page_title(page_title):
    """Company from "Title at Company", "Title - Company" or "Title | Company"."""
    match = re.search(r'\bat\s+(.+?)(?:\s*[-|]|$)', page_title or '', re.IGNORECASE)
    if match:
        return match.group(1).strip()
    match = re.search(r'[-|]\s*(.+?)(?:\s*[-|]|$)', page_title or '')
    if match:
        return match.group(1).strip()
    return None


def title_from_page_title(page_title):
    match = re.search(r'^(.+?)(?:\s+at\s+|\s*[-|]\s*)', page_title or '', re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return (page_title or '').strip() or None


def _parse_with_model(config_dict, page_text):
    """
    Ask the parsing model for structured job fields.

    Args:
        config_dict (dict): Configuration dictionary
        page_text (str): Visible text of the listing page

    Returns:
        dict: Parsed fields, or None when the model call or JSON parse fails
    """
    try:
        content, _ = call_openrouter(
            [
                {"role": "system", "content": JOB_PAGE_PARSE_PROMPT},
                {"role": "user", "content": (page_text or '')[:MAX_PAGE_CHARS]},
            ],
            config_dict['openrouter_api_key'],
            [config_dict['openrouter_job_parse_model']],
            temperature=0.1,
            max_tokens=1000,
            referer=config_dict['app_url'],
            title="JobKompass Extension",
        )
    except (OpenRouterError, requests.RequestException) as e:
        logger.error(f"OpenRouter request failed: {e}")
        return None
    try:
        parsed = extract_json_payload(content)
    except ValueError:
        logger.error(f"Failed to parse OpenRouter JSON response: {content[:500]}")
        return None
    return parsed if isinstance(parsed, dict) else None


def _string_list(value):
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def parse_job_page(config_dict, page_text, page_title):
    """
    Job fields for a listing page. Uses the parsing model when configured,
    falling back to the page title and text.

    Args:
        config_dict (dict): Configuration dictionary
        page_text (str): Visible text of the listing page
        page_title (str): Document title of the listing page

    Returns:
        dict: company, title, compensation, description, skills, keywords
    """
    parsed = None
    if config_dict.get('openrouter_api_key'):
        parsed = _parse_with_model(config_dict, page_text)
    else:
        logger.warning("OpenRouter API key not configured, using page title for job fields")
    parsed = parsed or {}

    skills = _string_list(parsed.get('skills'))
    keywords = _string_list(parsed.get('keywords'))
    return {
        'company': parsed.get('company') or company_from_page_title(page_title) or 'Unknown',
        'title': parsed.get('title') or title_from_page_title(page_title) or 'Job Listing',
        'compensation': parsed.get('compensation') or None,
        'description': parsed.get('description') or (page_text or '')[:FALLBACK_DESCRIPTION_CHARS],
        'skills': skills[:MAX_SKILLS],
        'keywords': keywords[:MAX_KEYWORDS],
    }


def save_job_from_page(config_dict, user_id, key_id, page_text, page_url, page_title, status=None):
    """
    Parse a job listing page and add it to the user's tracker.

    Args:
        config_dict (dict): Configuration dictionary
        user_id (int): Key owner
        key_id (int): Extension key used for the request
        page_text (str): Visible text of the listing page
        page_url (str): Listing URL
        page_title (str): Document title of the listing page
        status (str): Initial tracker status

    Returns:
        dict: The saved job

    Raises:
        LimitReachedError: If the user's job tracker is full
    """
    check = can_add_job(user_id, config_dict)
    if not check['allowed']:
        raise LimitReachedError(job_limit_message(check), limit=check['limit'], used=check['used'])

    fields = parse_job_page(config_dict, page_text, page_title)
    fields.update({'link': page_url or '', 'status': status or 'Interested'})
    job = add_job(user_id, fields, config_dict)

    mark_used(key_id, config_dict)
    return job
