"""
Free resume generator accounting.
"""
import pandas as pd

from services.subscription_service import get_user_subscription
from services.user_service import get_user_by_email
from utils.db_utils import get_db_connection, close_db_connection
from utils.time_utils import now_ms

FREE_RESUME_LIMIT = 2
PAID_PLANS = ('plus', 'plus-annual', 'pro', 'pro-annual')
DAY_MS = 24 * 60 * 60 * 1000


def record_generation(config_dict, input_type, text_character_count, template_id, email=None, pdf_size_bytes=None):
    """
    Record one successful free resume generation.

    Args:
        config_dict (dict): Configuration dictionary
        input_type (str): "text" or "pdf"
        text_character_count (int): Characters of resume text processed
        template_id (str): Template used
        email (str): Email the generation counts against
        pdf_size_bytes (int): Size of the uploaded PDF, for pdf input

    Returns:
        int: The new row id
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO free_resume_generations (email, input_type, text_character_count, pdf_size_bytes,
                                                 template_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (email, input_type, int(text_character_count or 0), pdf_size_bytes, template_id, now_ms()))
        conn.commit()
        return cursor.lastrowid
    finally:
        close_db_connection(conn)


def get_stats(config_dict, now=None):
    """
    Aggregate free resume generator usage.

    Returns:
        dict: totals, text/pdf split, characters and bytes processed,
            7 and 30 day counts, first and last generation timestamps
    """
    now = now if now is not None else now_ms()
    conn = get_db_connection(config_dict=config_dict)
    try:
        df = pd.read_sql_query("SELECT * FROM free_resume_generations", conn)
    finally:
        close_db_connection(conn)

    if df.empty:
        return {
            'total_generations': 0,
            'total_text_input_generations': 0,
            'total_pdf_processed': 0,
            'total_text_characters_processed': 0,
            'total_pdf_bytes_processed': 0,
            'generations_last_7_days': 0,
            'generations_last_30_days': 0,
            'first_generation_at': None,
            'last_generation_at': None,
        }

    counts = df['input_type'].value_counts()
    return {
        'total_generations': int(len(df)),
        'total_text_input_generations': int(counts.get('text', 0)),
        'total_pdf_processed': int(counts.get('pdf', 0)),
        'total_text_characters_processed': int(df['text_character_count'].fillna(0).sum()),
        'total_pdf_bytes_processed': int(df['pdf_size_bytes'].fillna(0).sum()),
        'generations_last_7_days': int((df['created_at'] >= now - 7 * DAY_MS).sum()),
        'generations_last_30_days': int((df['created_at'] >= now - 30 * DAY_MS).sum()),
        'first_generation_at': int(df['created_at'].min()),
        'last_generation_at': int(df['created_at'].max()),
    }


def is_plus_or_pro(email, config_dict):
    """True when a registered user with this email has an active plus or pro plan."""
    user = get_user_by_email(email, config_dict)
    if user is None:
        return False
    subscription = get_user_subscription(user['id'], config_dict)
    return bool(subscription and subscription['status'] == 'active' and subscription['plan_id'] in PAID_PLANS)


def check_free_resume_limit(email, config_dict):
    """
    Check how many free resumes an email has generated.

    Returns:
        dict: can_generate, count, limit and is_plus_or_pro
    """
    paid = is_plus_or_pro(email, config_dict)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT COUNT(*) FROM free_resume_generations WHERE email = ?", (email,))
        count = cursor.fetchone()[0]
    finally:
        close_db_connection(conn)
    return {
        'can_generate': paid or count < FREE_RESUME_LIMIT,
        'count': count,
        'limit': FREE_RESUME_LIMIT,
        'is_plus_or_pro': paid,
    }
