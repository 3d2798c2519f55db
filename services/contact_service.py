"""
Contact form submissions.
"""
from utils.db_utils import get_db_connection, close_db_connection, read_records
from utils.sanitizer_utils import normalize_whitespace, sanitize_email, validate_and_sanitize
from utils.time_utils import now_ms

MAX_SUBMISSIONS_PER_HOUR = 3
ONE_HOUR_MS = 60 * 60 * 1000
MAX_NAME_LENGTH = 100
MAX_SUBJECT_LENGTH = 200
MAX_MESSAGE_LENGTH = 5000


def add_contact(name, email, subject, message, config_dict, ip_address=None, user_agent=None):
    """
    Store a contact form submission.

    Submissions are limited per email address over a rolling hour.

    Args:
        name (str): Sender name
        email (str): Sender email
        subject (str): Subject line
        message (str): Message body
        config_dict (dict): Configuration dictionary
        ip_address (str): Client address, if known
        user_agent (str): Client user agent, if known

    Returns:
        dict: {"success": True, "id": ...} or {"success": False, "message": ...}
    """
    clean_email = sanitize_email(email)
    if not clean_email:
        return {"success": False, "message": "Invalid email address"}

    fields = {}
    for label, value, input_type, max_length in (
        ('Name', name, 'text', MAX_NAME_LENGTH),
        ('Subject', subject, 'text', MAX_SUBJECT_LENGTH),
        ('Message', message, 'textarea', MAX_MESSAGE_LENGTH),
    ):
        result = validate_and_sanitize(normalize_whitespace(value or '') if input_type == 'text' else value,
                                       input_type, max_length=max_length, required=True)
        if not result['sanitized']:
            return {"success": False, "message": f"{label} is required"}
        if not result['is_valid']:
            return {"success": False, "message": f"{label}: {result['errors'][0]}"}
        fields[label] = result['sanitized']
    clean_name, clean_subject, clean_message = fields['Name'], fields['Subject'], fields['Message']

    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "SELECT COUNT(*) FROM contacts WHERE email = ? AND created_at > ?",
            (clean_email, timestamp - ONE_HOUR_MS),
        )
        if cursor.fetchone()[0] >= MAX_SUBMISSIONS_PER_HOUR:
            return {"success": False, "message": "Too many submissions. Please try again later."}

        cursor.execute("""
            INSERT INTO contacts (name, email, subject, message, ip_address, user_agent, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (clean_name, clean_email, clean_subject, clean_message, ip_address, user_agent, timestamp))
        conn.commit()
        return {"success": True, "id": cursor.lastrowid}
    finally:
        close_db_connection(conn)


def list_contacts(config_dict, limit=100):
    conn = get_db_connection(config_dict=config_dict)
    try:
        return read_records(conn, "SELECT * FROM contacts ORDER BY created_at DESC, id DESC LIMIT ?", (limit,))
    finally:
        close_db_connection(conn)


def count_contacts(config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT COUNT(*) FROM contacts")
        return cursor.fetchone()[0]
    finally:
        close_db_connection(conn)
