"""
User, session and profile service layer.
"""
import re
import secrets

from werkzeug.security import generate_password_hash, check_password_hash

from services.errors import ValidationError, NotFoundError
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict, to_json, from_json
from utils.sanitizer_utils import sanitize_email, sanitize_input, sanitize_username
from utils.time_utils import now_ms

PUBLIC_USER_FIELDS = ('id', 'name', 'email', 'username', 'created_at')


def _public(user):
    if user is None:
        return None
    return {field: user.get(field) for field in PUBLIC_USER_FIELDS}


def create_user(name, email, password, config_dict, username=None):
    """
    Register a new user.

    Args:
        name (str): Display name
        email (str): Email address (unique)
        password (str): Plain text password, hashed before storage
        config_dict (dict): Configuration dictionary
        username (str): Optional username, derived from the email if omitted

    Returns:
        dict: The new user (without password hash)
    """
    clean_email = sanitize_email(email)
    if not clean_email:
        raise ValidationError("Invalid email address")
    if not password or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")

    clean_username = sanitize_username(username) if username else ''
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT id FROM users WHERE email = ?", (clean_email,))
        if cursor.fetchone():
            raise ValidationError("Email already registered")
        cursor.execute("""
            INSERT INTO users (name, email, username, password_hash, resume_preferences, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (
            sanitize_input(name or ''),
            clean_email,
            clean_username or None,
            generate_password_hash(password),
            to_json([]),
            now_ms(),
        ))
        conn.commit()
        user_id = cursor.lastrowid
    finally:
        close_db_connection(conn)
    return get_user_by_id(user_id, config_dict)


def get_user_by_id(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        return _public(fetch_one_dict(cursor))
    finally:
        close_db_connection(conn)


def get_user_by_email(email, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM users WHERE email = ?", ((email or '').strip().lower(),))
        return _public(fetch_one_dict(cursor))
    finally:
        close_db_connection(conn)


def authenticate(email, password, config_dict):
    """
    Check credentials.

    Returns:
        dict: The user, or None if the email/password pair is wrong
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM users WHERE email = ?", ((email or '').strip().lower(),))
        user = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if user is None or not check_password_hash(user['password_hash'], password or ''):
        return None
    return _public(user)


def create_session(user_id, config_dict):
    """Create a session and return its bearer token."""
    token = secrets.token_hex(32)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            "INSERT INTO sessions (token, user_id, created_at) VALUES (?, ?, ?)",
            (token, user_id, now_ms()),
        )
        conn.commit()
        return token
    finally:
        close_db_connection(conn)


def delete_session(token, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("DELETE FROM sessions WHERE token = ?", (token,))
        conn.commit()
        return cursor.rowcount > 0
    finally:
        close_db_connection(conn)


def get_user_by_token(token, config_dict):
    if not token:
        return None
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            SELECT u.* FROM sessions s
            JOIN users u ON u.id = s.user_id
            WHERE s.token = ?
        """, (token,))
        return _public(fetch_one_dict(cursor))
    finally:
        close_db_connection(conn)


def derive_username(user):
    """
    Username shown in threads: the stored username, else the email local
    part with non [a-z0-9] characters replaced, else user_<id prefix>.
    """
    if user.get('username'):
        return user['username']
    local_part = (user.get('email') or '').split('@')[0].lower()
    derived = re.sub(r'[^a-z0-9]', '_', local_part)
    return derived or f"user_{str(user['id'])[:8]}"


def get_or_create_username(user_id, config_dict):
    """Return the user's username, persisting a derived one if none is set."""
    user = get_user_by_id(user_id, config_dict)
    if user is None:
        return None
    if user.get('username'):
        return user['username']
    username = derive_username(user)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("UPDATE users SET username = ? WHERE id = ?", (username, user_id))
        conn.commit()
    finally:
        close_db_connection(conn)
    return username


def get_resume_preferences(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT resume_preferences FROM users WHERE id = ?", (user_id,))
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError("User not found")
        return from_json(row[0], default=[])
    finally:
        close_db_connection(conn)


def set_resume_preferences(user_id, preferences, config_dict):
    """
    Replace the user's resume preferences.

    Args:
        user_id (int): User ID
        preferences (list): Free-text preferences applied to every generated resume
        config_dict (dict): Configuration dictionary

    Returns:
        list: The stored preferences
    """
    if not isinstance(preferences, list) or not all(isinstance(p, str) for p in preferences):
        raise ValidationError("Preferences must be a list of strings")
    cleaned = [p.strip() for p in preferences if p.strip()]
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("UPDATE users SET resume_preferences = ? WHERE id = ?", (to_json(cleaned), user_id))
        conn.commit()
        return cleaned
    finally:
        close_db_connection(conn)
