"""
Input sanitization utilities.

Applied to user supplied strings before they are persisted (contact form,
email list, usernames, resource links).
"""
import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

INPUT_TYPES = ('text', 'email', 'username', 'url', 'richText', 'textarea')

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
_HTML_ENTITIES = [
    ('&', '&amp;'),
    ('<', '&lt;'),
    ('>', '&gt;'),
    ('"', '&quot;'),
    ("'", '&#x27;'),
    ('/', '&#x2F;'),
]
_DANGEROUS_TAGS = ('script', 'iframe', 'embed', 'object')


def sanitize_input(text):
    """
    Sanitize a plain text value: strip control characters, HTML-encode
    markup characters and remove query-operator and script patterns.

    Args:
        text (str): Raw input

    Returns:
        str: Sanitized, trimmed text
    """
    if not isinstance(text, str):
        return str(text)

    sanitized = text.replace('\0', '')
    sanitized = _CONTROL_CHARS.sub('', sanitized)

    for char, entity in _HTML_ENTITIES:
        sanitized = sanitized.replace(char, entity)

    sanitized = re.sub(r'\$[a-zA-Z_][a-zA-Z0-9_]*', '', sanitized)
    sanitized = re.sub(r'\{\s*\$[a-zA-Z_][a-zA-Z0-9_]*\s*\}', '', sanitized)

    sanitized = re.sub(r'javascript:', '', sanitized, flags=re.IGNORECASE)
    sanitized = re.sub(r'on\w+\s*=', '', sanitized, flags=re.IGNORECASE)

    return sanitized.strip()


def sanitize_rich_text(html):
    """
    Sanitize HTML while keeping harmless markup.

    Removes script/iframe/embed/object elements, inline event handlers and
    javascript: URLs.

    Args:
        html (str): HTML fragment

    Returns:
        str: Sanitized HTML
    """
    if not isinstance(html, str):
        return str(html)

    soup = BeautifulSoup(html.replace('\0', ''), 'html.parser')
    for tag in soup.find_all(_DANGEROUS_TAGS):
        tag.decompose()
    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            if attr.lower().startswith('on'):
                del tag.attrs[attr]
    sanitized = str(soup)
    sanitized = re.sub(r'javascript:', '', sanitized, flags=re.IGNORECASE)
    return sanitized.strip()


def sanitize_email(email):
    """
    Validate and normalize an email address.

    Args:
        email (str): Raw email

    Returns:
        str: Lowercased email, or '' if it is not a valid address
    """
    if not isinstance(email, str):
        return ''
    sanitized = email.strip().lower()
    if not EMAIL_PATTERN.match(sanitized):
        return ''
    return re.sub(r'[^a-z0-9@._-]', '', sanitized)


def is_valid_email(email):
    return isinstance(email, str) and bool(EMAIL_PATTERN.match(email.strip().lower()))


def sanitize_username(username):
    """Keep [a-zA-Z0-9._-]; usernames must be 3-30 characters, else ''."""
    if not isinstance(username, str):
        return ''
    sanitized = re.sub(r'[^a-zA-Z0-9._-]', '', username.strip())
    if len(sanitized) < 3 or len(sanitized) > 30:
        return ''
    return sanitized


def sanitize_url(url):
    """Only http(s) URLs with a host survive; anything else becomes ''."""
    if not isinstance(url, str):
        return ''
    sanitized = url.strip()
    if re.match(r'^(javascript|data|vbscript):', sanitized, flags=re.IGNORECASE):
        return ''
    parsed = urlparse(sanitized)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return ''
    return sanitized


def validate_length(text, min_length=0, max_length=float('inf')):
    if not isinstance(text, str):
        return False
    length = len(text.strip())
    return min_length <= length <= max_length


def normalize_whitespace(text):
    if not isinstance(text, str):
        return str(text)
    return re.sub(r'\s+', ' ', text).strip()


def sanitize_by_type(text, input_type='text'):
    """
    Dispatch to the sanitizer for an input type.

    Args:
        text (str): Raw input
        input_type (str): One of text, email, username, url, richText, textarea

    Returns:
        str: Sanitized value
    """
    if input_type == 'email':
        return sanitize_email(text)
    if input_type == 'username':
        return sanitize_username(text)
    if input_type == 'url':
        return sanitize_url(text)
    if input_type == 'richText':
        return sanitize_rich_text(text)
    if input_type == 'textarea':
        # Apostrophes and slashes are common in long-form text
        return sanitize_input(text).replace('&#x27;', "'").replace('&#x2F;', '/')
    return sanitize_input(text)


def validate_and_sanitize(text, input_type='text', min_length=0, max_length=float('inf'),
                          required=False, pattern=None, custom_validator=None):
    """
    Sanitize a value and collect validation errors.

    Args:
        text (str): Raw input
        input_type (str): Sanitizer to apply (see sanitize_by_type)
        min_length (int): Minimum trimmed length
        max_length (int): Maximum trimmed length
        required (bool): Whether an empty value is an error
        pattern (str | re.Pattern): Optional regex the sanitized value must match
        custom_validator (callable): Optional predicate on the sanitized value

    Returns:
        dict: {"is_valid": bool, "sanitized": str, "errors": list}
    """
    errors = []

    if required and (not text or not str(text).strip()):
        errors.append('This field is required')
        return {"is_valid": False, "sanitized": '', "errors": errors}

    sanitized = sanitize_by_type(text or '', input_type)

    if not validate_length(sanitized, min_length, max_length):
        if len(sanitized) < min_length:
            errors.append(f'Must be at least {min_length} characters')
        if len(sanitized) > max_length:
            errors.append(f'Must be no more than {max_length} characters')

    if pattern is not None and not re.search(pattern, sanitized):
        errors.append('Invalid format')

    if custom_validator is not None and not custom_validator(sanitized):
        errors.append('Validation failed')

    if input_type == 'email' and sanitized == '' and (text or '').strip() != '':
        errors.append('Invalid email address')

    return {"is_valid": len(errors) == 0, "sanitized": sanitized, "errors": errors}


def sanitize_string_list(value):
    """
    Normalize a tag/keyword list. None becomes [], a lone string becomes a
    one item list and blank items are dropped.

    Returns:
        list: The cleaned list, or None if value is not a string or a list of strings
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        return None
    return [item.strip() for item in value if item.strip()]
