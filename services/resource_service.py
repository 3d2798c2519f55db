"""
Career resource library service layer.
"""
from services.errors import NotAuthorizedError, NotFoundError, ValidationError
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict, read_records, to_json, from_json
from utils.sanitizer_utils import sanitize_rich_text, sanitize_string_list, sanitize_url
from utils.time_utils import now_ms

EDITABLE_FIELDS = ('type', 'title', 'url', 'description', 'notes', 'tags', 'category')


def _encode_tags(tags):
    items = sanitize_string_list(tags)
    if items is None:
        raise ValidationError("tags must be a list of strings")
    return to_json(items)


def _decode(resource):
    if resource is not None:
        resource['tags'] = from_json(resource.get('tags'), default=[])
    return resource


def _clean_notes(notes):
    return sanitize_rich_text(notes) if isinstance(notes, str) else notes


def list_resources(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    try:
        return read_records(
            conn,
            "SELECT * FROM resources WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
            json_columns=('tags',),
            json_defaults={'tags': []},
        )
    finally:
        close_db_connection(conn)


def get_resource(resource_id, user_id, config_dict):
    """
    Get a single resource.

    Returns:
        dict: The resource, or None if not found

    Raises:
        NotAuthorizedError: If the resource belongs to another user
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM resources WHERE id = ?", (resource_id,))
        resource = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if resource is None:
        return None
    if resource['user_id'] != user_id:
        raise NotAuthorizedError()
    return _decode(resource)


def add_resource(user_id, data, config_dict):
    """
    Save a link to the user's library.

    Args:
        user_id (int): Owner
        data (dict): title and url are required; type, description, notes, tags, category optional
        config_dict (dict): Configuration dictionary

    Returns:
        dict: The stored resource
    """
    title = (data.get('title') or '').strip()
    url = sanitize_url(data.get('url') or '')
    if not title:
        raise ValidationError("Title is required")
    if not url:
        raise ValidationError("A valid http(s) URL is required")

    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO resources (user_id, type, title, url, description, notes, tags, category, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            user_id,
            data.get('type') or 'resource',
            title,
            url,
            data.get('description'),
            _clean_notes(data.get('notes')),
            _encode_tags(data.get('tags')),
            data.get('category'),
            timestamp,
            timestamp,
        ))
        conn.commit()
        resource_id = cursor.lastrowid
    finally:
        close_db_connection(conn)
    return get_resource(resource_id, user_id, config_dict)


def update_resource(resource_id, user_id, data, config_dict):
    resource = get_resource(resource_id, user_id, config_dict)
    if resource is None:
        raise NotFoundError("Resource not found")

    updates = {field: data[field] for field in EDITABLE_FIELDS if field in data}
    if 'url' in updates:
        updates['url'] = sanitize_url(updates['url'] or '')
        if not updates['url']:
            raise ValidationError("A valid http(s) URL is required")
    if 'notes' in updates:
        updates['notes'] = _clean_notes(updates['notes'])
    if 'tags' in updates:
        updates['tags'] = _encode_tags(updates['tags'])
    if not updates:
        return resource

    assignments = ', '.join(f"{field} = ?" for field in updates)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            f"UPDATE resources SET {assignments}, updated_at = ? WHERE id = ?",
            list(updates.values()) + [now_ms(), resource_id],
        )
        conn.commit()
    finally:
        close_db_connection(conn)
    return get_resource(resource_id, user_id, config_dict)


def delete_resource(resource_id, user_id, config_dict):
    if get_resource(resource_id, user_id, config_dict) is None:
        raise NotFoundError("Resource not found")
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("DELETE FROM resources WHERE id = ?", (resource_id,))
        conn.commit()
        return True
    finally:
        close_db_connection(conn)
