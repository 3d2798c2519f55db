"""
Email list and waitlist service layer.
"""
from services.errors import ValidationError
from utils.db_utils import get_db_connection, close_db_connection, read_records
from utils.sanitizer_utils import sanitize_email, sanitize_input
from utils.time_utils import now_ms

FREE_RESUME = 'free-resume'
WAITLIST = 'waitlist'
SUBMISSION_TYPES = (FREE_RESUME, WAITLIST)


def add_email(email, submission_type, config_dict, name=None):
    """
    Add an email to the list for a submission type. Adding the same
    (email, type) pair twice returns the existing entry.

    Args:
        email (str): Email address
        submission_type (str): "free-resume" or "waitlist"
        config_dict (dict): Configuration dictionary
        name (str): Optional name

    Returns:
        dict: {"success", "id", "already_existed"} or {"success": False, "message"}
    """
    if submission_type not in SUBMISSION_TYPES:
        raise ValidationError(f"Invalid submission type: {submission_type}")
    clean_email = sanitize_email(email)
    if not clean_email:
        return {"success": False, "message": "Invalid email address"}

    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "SELECT id FROM email_list WHERE email = ? AND submission_type = ?",
            (clean_email, submission_type),
        )
        existing = cursor.fetchone()
        if existing:
            return {"success": True, "id": existing[0], "already_existed": True}

        cursor.execute(
            "INSERT INTO email_list (email, name, submission_type, created_at) VALUES (?, ?, ?, ?)",
            (clean_email, sanitize_input(name) if name else None, submission_type, now_ms()),
        )
        conn.commit()
        return {"success": True, "id": cursor.lastrowid, "already_existed": False}
    finally:
        close_db_connection(conn)


def check_email(email, submission_type, config_dict):
    clean_email = sanitize_email(email)
    if not clean_email:
        return {"found": False}
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "SELECT 1 FROM email_list WHERE email = ? AND submission_type = ?",
            (clean_email, submission_type),
        )
        return {"found": cursor.fetchone() is not None}
    finally:
        close_db_connection(conn)


def list_emails(config_dict, submission_type=None):
    conn = get_db_connection(config_dict=config_dict)
    try:
        if submission_type:
            return read_records(
                conn,
                "SELECT * FROM email_list WHERE submission_type = ? ORDER BY created_at DESC, id DESC",
                (submission_type,),
            )
        return read_records(conn, "SELECT * FROM email_list ORDER BY created_at DESC, id DESC")
    finally:
        close_db_connection(conn)


def join_waitlist(email, config_dict, name=None):
    clean_email = sanitize_email(email)
    if not clean_email:
        return {"success": False, "message": "Invalid email address"}
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT id FROM waitlist WHERE email = ?", (clean_email,))
        if cursor.fetchone():
            return {"success": False, "message": "Email already on waitlist"}
        cursor.execute(
            "INSERT INTO waitlist (email, name, created_at) VALUES (?, ?, ?)",
            (clean_email, sanitize_input(name) if name else None, now_ms()),
        )
        conn.commit()
        return {"success": True, "id": cursor.lastrowid}
    finally:
        close_db_connection(conn)


def list_waitlist(config_dict):
    conn = get_db_connection(config_dict=config_dict)
    try:
        return read_records(conn, "SELECT * FROM waitlist ORDER BY created_at DESC, id DESC")
    finally:
        close_db_connection(conn)
