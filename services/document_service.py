"""
Document service layer: resumes, cover letters, email templates and stored files.
"""
import sqlite3

from services.errors import NotAuthorizedError, NotFoundError, ValidationError
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict, read_records, to_json, from_json
from utils.sanitizer_utils import sanitize_string_list
from utils.time_utils import now_ms

RESUME_FIELDS = ('name', 'label', 'tags', 'template', 'content', 'file_name', 'file_type', 'is_active')
COVER_LETTER_FIELDS = ('name', 'content', 'template', 'company', 'position', 'file_name')
EMAIL_TEMPLATE_FIELDS = ('name', 'subject', 'body', 'type')


def _encode_tags(tags):
    items = sanitize_string_list(tags)
    if items is None:
        raise ValidationError("tags must be a list of strings")
    return to_json(items)


# Files

def store_file(user_id, data, content_type, file_name, config_dict):
    """
    Store a binary blob for a user.

    Args:
        user_id (int): Owner
        data (bytes): File contents
        content_type (str): MIME type
        file_name (str): Download name
        config_dict (dict): Configuration dictionary

    Returns:
        int: The new file id
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO files (user_id, file_name, content_type, size, data, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (user_id, file_name, content_type, len(data), sqlite3.Binary(data), now_ms()))
        conn.commit()
        return cursor.lastrowid
    finally:
        close_db_connection(conn)


def get_file(file_id, user_id, config_dict):
    """
    Get a stored file with its data.

    Raises:
        NotFoundError: If the file does not exist
        NotAuthorizedError: If the file belongs to another user
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM files WHERE id = ?", (file_id,))
        stored = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if stored is None:
        raise NotFoundError("File not found")
    if stored['user_id'] != user_id:
        raise NotAuthorizedError()
    stored['data'] = bytes(stored['data'])
    return stored


def _delete_file(cursor, file_id):
    if file_id is not None:
        cursor.execute("DELETE FROM files WHERE id = ?", (int(file_id),))


# Shared helpers

def _get_owned(table, record_id, user_id, not_found_message, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,))
        record = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if record is None or record['user_id'] != user_id:
        raise NotFoundError(not_found_message)
    return record


def _update_owned(table, record_id, updates, config_dict):
    if not updates:
        return
    assignments = ', '.join(f"{field} = ?" for field in updates)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            f"UPDATE {table} SET {assignments}, updated_at = ? WHERE id = ?",
            list(updates.values()) + [now_ms(), record_id],
        )
        conn.commit()
    finally:
        close_db_connection(conn)


def _delete_owned(table, record, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(f"DELETE FROM {table} WHERE id = ?", (record['id'],))
        _delete_file(cursor, record.get('file_id'))
        conn.commit()
        return True
    finally:
        close_db_connection(conn)


# Resumes

def _decode_resume(resume):
    resume['tags'] = from_json(resume.get('tags'), default=[])
    resume['content'] = from_json(resume.get('content'))
    if resume.get('is_active') is not None:
        resume['is_active'] = bool(resume['is_active'])
    return resume


def list_resumes(user_id, config_dict):
    """
    Get the user's resumes, newest first.

    Args:
        user_id (int): Owner
        config_dict (dict): Configuration dictionary

    Returns:
        list: List of resume dictionaries with decoded content
    """
    conn = get_db_connection(config_dict=config_dict)
    try:
        resumes = read_records(
            conn,
            "SELECT * FROM resumes WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
    finally:
        close_db_connection(conn)
    return [_decode_resume(resume) for resume in resumes]


def get_resume(resume_id, user_id, config_dict):
    resume = _get_owned('resumes', resume_id, user_id, "Resume not found or access denied", config_dict)
    return _decode_resume(resume)


def save_resume(user_id, data, config_dict, file_id=None, file_size=None):
    """
    Create a resume.

    Args:
        user_id (int): Owner
        data (dict): name is required; label, tags, template, content, file_name, file_type optional
        config_dict (dict): Configuration dictionary
        file_id (int): Stored PDF for generated resumes
        file_size (int): Size of the stored PDF

    Returns:
        dict: The stored resume
    """
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError("Resume name is required")
    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO resumes (user_id, name, label, tags, template, content, file_id, file_name,
                                 file_type, file_size, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            name,
            data.get('label'),
            _encode_tags(data.get('tags')),
            data.get('template'),
            to_json(data.get('content')),
            file_id,
            data.get('file_name'),
            data.get('file_type'),
            file_size,
            1 if data.get('is_active', True) else 0,
            timestamp,
            timestamp,
        ))
        conn.commit()
        resume_id = cursor.lastrowid
    finally:
        close_db_connection(conn)
    return get_resume(resume_id, user_id, config_dict)


def update_resume(resume_id, user_id, data, config_dict):
    get_resume(resume_id, user_id, config_dict)
    updates = {field: data[field] for field in RESUME_FIELDS if field in data}
    if 'tags' in updates:
        updates['tags'] = _encode_tags(updates['tags'])
    if 'content' in updates:
        updates['content'] = to_json(updates['content'])
    if 'is_active' in updates:
        updates['is_active'] = 1 if updates['is_active'] else 0
    _update_owned('resumes', resume_id, updates, config_dict)
    return get_resume(resume_id, user_id, config_dict)


def delete_resume(resume_id, user_id, config_dict):
    resume = get_resume(resume_id, user_id, config_dict)
    return _delete_owned('resumes', resume, config_dict)


def save_generated_resume_with_file(user_id, name, pdf_bytes, file_name, content, template, config_dict):
    """
    Store a compiled resume PDF and create the resume entry pointing at it.

    Returns:
        dict: The stored resume
    """
    file_id = store_file(user_id, pdf_bytes, 'application/pdf', file_name, config_dict)
    return save_resume(
        user_id,
        {
            'name': name,
            'template': template,
            'content': content,
            'file_name': file_name,
            'file_type': 'application/pdf',
        },
        config_dict,
        file_id=file_id,
        file_size=len(pdf_bytes),
    )


# Cover letters

def _decode_cover_letter(letter):
    letter['content'] = from_json(letter.get('content'))
    return letter


def list_cover_letters(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    try:
        letters = read_records(
            conn,
            "SELECT * FROM cover_letters WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
    finally:
        close_db_connection(conn)
    return [_decode_cover_letter(letter) for letter in letters]


def get_cover_letter(letter_id, user_id, config_dict):
    letter = _get_owned('cover_letters', letter_id, user_id, "Cover letter not found or access denied", config_dict)
    return _decode_cover_letter(letter)


def save_cover_letter(user_id, data, config_dict, file_id=None, file_size=None):
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError("Cover letter name is required")
    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO cover_letters (user_id, name, content, template, company, position,
                                       file_id, file_name, file_size, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            name,
            to_json(data.get('content')),
            data.get('template'),
            data.get('company'),
            data.get('position'),
            file_id,
            data.get('file_name'),
            file_size,
            timestamp,
            timestamp,
        ))
        conn.commit()
        letter_id = cursor.lastrowid
    finally:
        close_db_connection(conn)
    return get_cover_letter(letter_id, user_id, config_dict)


def update_cover_letter(letter_id, user_id, data, config_dict):
    get_cover_letter(letter_id, user_id, config_dict)
    updates = {field: data[field] for field in COVER_LETTER_FIELDS if field in data}
    if 'content' in updates:
        updates['content'] = to_json(updates['content'])
    _update_owned('cover_letters', letter_id, updates, config_dict)
    return get_cover_letter(letter_id, user_id, config_dict)


def delete_cover_letter(letter_id, user_id, config_dict):
    letter = get_cover_letter(letter_id, user_id, config_dict)
    return _delete_owned('cover_letters', letter, config_dict)


def save_generated_cover_letter_with_file(user_id, name, pdf_bytes, file_name, content, template,
                                          config_dict, company=None, position=None):
    """
    Store a compiled cover letter PDF and create the cover letter entry pointing at it.

    Returns:
        dict: The stored cover letter
    """
    file_id = store_file(user_id, pdf_bytes, 'application/pdf', file_name, config_dict)
    return save_cover_letter(
        user_id,
        {
            'name': name,
            'content': content,
            'template': template,
            'company': company,
            'position': position,
            'file_name': file_name,
        },
        config_dict,
        file_id=file_id,
        file_size=len(pdf_bytes),
    )


# Email templates

def list_email_templates(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    try:
        return read_records(
            conn,
            "SELECT * FROM email_templates WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
    finally:
        close_db_connection(conn)


def get_email_template(template_id, user_id, config_dict):
    return _get_owned('email_templates', template_id, user_id, "Email template not found or access denied", config_dict)


def save_email_template(user_id, data, config_dict):
    name = (data.get('name') or '').strip()
    if not name:
        raise ValidationError("Template name is required")
    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO email_templates (user_id, name, subject, body, type, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (user_id, name, data.get('subject'), data.get('body'), data.get('type'), timestamp, timestamp))
        conn.commit()
        template_id = cursor.lastrowid
    finally:
        close_db_connection(conn)
    return get_email_template(template_id, user_id, config_dict)


def update_email_template(template_id, user_id, data, config_dict):
    get_email_template(template_id, user_id, config_dict)
    updates = {field: data[field] for field in EMAIL_TEMPLATE_FIELDS if field in data}
    _update_owned('email_templates', template_id, updates, config_dict)
    return get_email_template(template_id, user_id, config_dict)


def delete_email_template(template_id, user_id, config_dict):
    template = get_email_template(template_id, user_id, config_dict)
    return _delete_owned('email_templates', template, config_dict)
