"""
Chat thread history service layer. Threads are keyed by username.
"""
from services.errors import NotAuthorizedError, ValidationError
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict, read_records, to_json
from utils.time_utils import now_ms

MESSAGE_ROLES = ('user', 'assistant', 'system', 'tool')


def _decode(thread):
    if thread is not None:
        thread['context_window_exceeded'] = bool(thread.get('context_window_exceeded'))
    return thread


def _get_owned_thread(cursor, thread_id, username):
    cursor.execute("SELECT * FROM threads WHERE id = ?", (thread_id,))
    thread = fetch_one_dict(cursor)
    if thread is None or thread['username'] != username:
        raise NotAuthorizedError()
    return thread


def list_threads(username, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    try:
        threads = read_records(
            conn,
            "SELECT * FROM threads WHERE username = ? ORDER BY updated_at DESC, id DESC",
            (username,),
        )
    finally:
        close_db_connection(conn)
    return [_decode(thread) for thread in threads]


def get_thread(thread_id, username, config_dict):
    """
    Get a thread with its messages in chronological order.

    Args:
        thread_id (int): Thread ID
        username (str): Requesting username
        config_dict (dict): Configuration dictionary

    Returns:
        dict: {"thread": ..., "messages": [...]}, or None if missing or owned by someone else
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM threads WHERE id = ?", (thread_id,))
        thread = fetch_one_dict(cursor)
        if thread is None or thread['username'] != username:
            return None
        messages = read_records(
            conn,
            "SELECT * FROM messages WHERE thread_id = ? ORDER BY created_at ASC, id ASC",
            (thread_id,),
            json_columns=('tool_calls',),
        )
        return {"thread": _decode(thread), "messages": messages}
    finally:
        close_db_connection(conn)


def create_thread(username, title, config_dict):
    timestamp = now_ms()
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO threads (username, title, created_at, updated_at, last_message_at, message_count,
                                 context_window_exceeded)
            VALUES (?, ?, ?, ?, ?, 0, 0)
        """, (username, (title or 'New chat').strip() or 'New chat', timestamp, timestamp, timestamp))
        conn.commit()
        return cursor.lastrowid
    finally:
        close_db_connection(conn)


def add_message(thread_id, username, role, content, config_dict, tool_calls=None):
    """
    Append a message and bump the thread's counters.

    Args:
        thread_id (int): Thread ID
        username (str): Requesting username
        role (str): Message role
        content (str): Message text
        config_dict (dict): Configuration dictionary
        tool_calls (list): Optional [{name, arguments, result}] records

    Returns:
        int: The new message id

    Raises:
        NotAuthorizedError: If the thread is missing or owned by someone else
    """
    if role not in MESSAGE_ROLES:
        raise ValidationError(f"Invalid role: {role}")
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        thread = _get_owned_thread(cursor, thread_id, username)
        timestamp = now_ms()
        cursor.execute("""
            INSERT INTO messages (thread_id, username, role, content, tool_calls, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (thread_id, username, role, content or '', to_json(tool_calls), timestamp))
        message_id = cursor.lastrowid
        cursor.execute(
            "UPDATE threads SET updated_at = ?, last_message_at = ?, message_count = ? WHERE id = ?",
            (timestamp, timestamp, thread['message_count'] + 1, thread_id),
        )
        conn.commit()
        return message_id
    finally:
        close_db_connection(conn)


def update_title(thread_id, username, title, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        _get_owned_thread(cursor, thread_id, username)
        cursor.execute("UPDATE threads SET title = ?, updated_at = ? WHERE id = ?", (title, now_ms(), thread_id))
        conn.commit()
    finally:
        close_db_connection(conn)


def remove_thread(thread_id, username, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        _get_owned_thread(cursor, thread_id, username)
        cursor.execute("DELETE FROM messages WHERE thread_id = ?", (thread_id,))
        cursor.execute("DELETE FROM threads WHERE id = ?", (thread_id,))
        conn.commit()
    finally:
        close_db_connection(conn)


def mark_context_window_exceeded(thread_id, username, exceeded, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        _get_owned_thread(cursor, thread_id, username)
        cursor.execute(
            "UPDATE threads SET context_window_exceeded = ?, updated_at = ? WHERE id = ?",
            (1 if exceeded else 0, now_ms(), thread_id),
        )
        conn.commit()
    finally:
        close_db_connection(conn)
