"""
Job tracker service layer.
"""
import csv
import io

from flask import Response

from services.errors import NotAuthorizedError, NotFoundError, ValidationError
from utils.db_utils import get_db_connection, close_db_connection, fetch_one_dict, read_records, to_json, from_json
from utils.sanitizer_utils import sanitize_string_list
from utils.time_utils import now_ms

JOB_STATUSES = ('Interested', 'Applied', 'Callback', 'Interviewing', 'Offered', 'Rejected')
DEFAULT_STATUS = 'Interested'

JSON_COLUMNS = ('keywords', 'skills')

# Fields a client may set on create or update
EDITABLE_FIELDS = (
    'company', 'title', 'link', 'status', 'compensation', 'keywords', 'skills',
    'description', 'date_applied', 'interviewed', 'easy_apply', 'resume_used',
    'cover_letter_used', 'notes',
)


def _decode(job):
    if job is None:
        return None
    job['keywords'] = from_json(job.get('keywords'), default=[])
    job['skills'] = from_json(job.get('skills'), default=[])
    if job.get('interviewed') is not None:
        job['interviewed'] = bool(job['interviewed'])
    return job


def _encode_list(field, value):
    items = sanitize_string_list(value)
    if items is None:
        raise ValidationError(f"{field} must be a list of strings")
    return to_json(items)


def _encode_value(field, value):
    if field in JSON_COLUMNS:
        return _encode_list(field, value)
    if field == 'interviewed' and value is not None:
        return 1 if value else 0
    return value


def _validate_status(status):
    if status not in JOB_STATUSES:
        raise ValidationError(f"Invalid status: {status}. Valid: {', '.join(JOB_STATUSES)}")


def list_jobs(user_id, config_dict, status=None):
    """
    Get the user's jobs, newest first.

    Args:
        user_id (int): Owner
        config_dict (dict): Configuration dictionary
        status (str): Only return jobs with this status

    Returns:
        list: List of job dictionaries
    """
    conn = get_db_connection(config_dict=config_dict)
    try:
        query = "SELECT * FROM jobs WHERE user_id = ?"
        params = [user_id]
        if status:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY created_at DESC, id DESC"
        jobs = read_records(conn, query, tuple(params), json_columns=JSON_COLUMNS,
                            json_defaults={'keywords': [], 'skills': []})
        for job in jobs:
            if job.get('interviewed') is not None:
                job['interviewed'] = bool(job['interviewed'])
        return jobs
    finally:
        close_db_connection(conn)


def get_job(job_id, user_id, config_dict):
    """
    Get a single job by its ID.

    Args:
        job_id (int): Job ID
        user_id (int): Requesting user
        config_dict (dict): Configuration dictionary

    Returns:
        dict: Job dictionary, or None if not found

    Raises:
        NotAuthorizedError: If the job belongs to another user
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT * FROM jobs WHERE id = ?", (job_id,))
        job = fetch_one_dict(cursor)
    finally:
        close_db_connection(conn)
    if job is None:
        return None
    if job['user_id'] != user_id:
        raise NotAuthorizedError()
    return _decode(job)


def add_job(user_id, data, config_dict):
    """
    Add a job to the user's tracker.

    Args:
        user_id (int): Owner
        data (dict): Job fields; company and title are required
        config_dict (dict): Configuration dictionary

    Returns:
        dict: The stored job
    """
    company = (data.get('company') or '').strip()
    title = (data.get('title') or '').strip()
    if not company or not title:
        raise ValidationError("Company and title are required")
    status = data.get('status') or DEFAULT_STATUS
    _validate_status(status)

    values = {field: data.get(field) for field in EDITABLE_FIELDS}
    values.update({'company': company, 'title': title, 'status': status, 'link': data.get('link') or ''})
    timestamp = now_ms()

    columns = list(EDITABLE_FIELDS) + ['user_id', 'created_at', 'updated_at']
    params = [_encode_value(field, values[field]) for field in EDITABLE_FIELDS] + [user_id, timestamp, timestamp]

    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(
            f"INSERT INTO jobs ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            params,
        )
        conn.commit()
        job_id = cursor.lastrowid
    finally:
        close_db_connection(conn)
    return get_job(job_id, user_id, config_dict)


def update_job(job_id, user_id, data, config_dict):
    """
    Update a job. Unknown fields are ignored.

    Returns:
        dict: The updated job
    """
    job = get_job(job_id, user_id, config_dict)
    if job is None:
        raise NotFoundError("Job not found")

    updates = {field: data[field] for field in EDITABLE_FIELDS if field in data}
    for field in ('company', 'title'):
        if field in updates:
            value = updates[field]
            updates[field] = value.strip() if isinstance(value, str) else ''
            if not updates[field]:
                raise ValidationError("Company and title are required")
    if 'status' in updates:
        _validate_status(updates['status'])
    if not updates:
        return job

    assignments = ', '.join(f"{field} = ?" for field in updates)
    params = [_encode_value(field, value) for field, value in updates.items()] + [now_ms(), job_id]

    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(f"UPDATE jobs SET {assignments}, updated_at = ? WHERE id = ?", params)
        conn.commit()
    finally:
        close_db_connection(conn)
    return get_job(job_id, user_id, config_dict)


def delete_job(job_id, user_id, config_dict):
    job = get_job(job_id, user_id, config_dict)
    if job is None:
        raise NotFoundError("Job not found")
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
        conn.commit()
        return True
    finally:
        close_db_connection(conn)


def count_jobs(user_id, config_dict):
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute("SELECT COUNT(*) FROM jobs WHERE user_id = ?", (user_id,))
        return cursor.fetchone()[0]
    finally:
        close_db_connection(conn)


CSV_COLUMNS = (
    ('Company', 'company'),
    ('Title', 'title'),
    ('Status', 'status'),
    ('Compensation', 'compensation'),
    ('Date Applied', 'date_applied'),
    ('Link', 'link'),
    ('Resume Used', 'resume_used'),
    ('Cover Letter Used', 'cover_letter_used'),
    ('Notes', 'notes'),
)


def export_jobs_csv(user_id, config_dict):
    """
    Export the user's tracker to CSV format.

    Args:
        user_id (int): Owner
        config_dict (dict): Configuration dictionary

    Returns:
        Response: Flask Response object with CSV data
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        cursor.execute(f"""
            SELECT {', '.join(column for _, column in CSV_COLUMNS)}
            FROM jobs
            WHERE user_id = ?
            ORDER BY created_at DESC, id DESC
        """, (user_id,))

        # Create CSV in memory
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow([header for header, _ in CSV_COLUMNS])
        for row in cursor.fetchall():
            writer.writerow(row)

        output.seek(0)
        return Response(
            output.getvalue(),
            mimetype='text/csv',
            headers={
                'Content-Disposition': 'attachment; filename=jobs_export.csv'
            }
        )
    finally:
        close_db_connection(conn)
