"""
Plan limits and usage accounting.
"""
from services.job_service import count_jobs
from services.subscription_service import get_user_subscription
from utils.db_utils import get_db_connection, close_db_connection
from utils.time_utils import month_start_ms

DOCUMENT_LIMITS = {
    'free': 3,
    'starter': 10,
    'plus': 60,
    'plus-annual': 60,
    'pro': 180,
    'pro-annual': 180,
}

# None means unlimited
JOB_LIMITS = {
    'free': 10,
    'starter': 100,
    'plus': 100,
    'plus-annual': 100,
    'pro': None,
    'pro-annual': None,
}

PLAN_LABELS = {
    'free': 'Free',
    'starter': 'Starter',
    'plus': 'Plus',
    'plus-annual': 'Plus (Annual)',
    'pro': 'Pro',
    'pro-annual': 'Pro (Annual)',
}

UPGRADE_SUGGESTIONS = {
    'free': 'Upgrade to Starter or Plus to track up to 100 jobs.',
    'starter': 'Upgrade to Pro for unlimited job tracking.',
    'plus': 'Upgrade to Pro for unlimited job tracking.',
    'plus-annual': 'Upgrade to Pro for unlimited job tracking.',
}


def get_document_limit(plan_id):
    return DOCUMENT_LIMITS.get(plan_id, DOCUMENT_LIMITS['free'])


def get_job_limit(plan_id):
    if plan_id not in JOB_LIMITS:
        return JOB_LIMITS['free']
    return JOB_LIMITS[plan_id]


def get_effective_plan(user_id, config_dict):
    """
    Resolve the plan a user is billed on.

    Returns:
        tuple: (plan_id, subscription_status) where subscription_status is
            "active", "inactive" for a lapsed subscription, or None
    """
    subscription = get_user_subscription(user_id, config_dict)
    if subscription is None:
        return 'free', None
    if subscription['status'] == 'active':
        plan_id = subscription['plan_id']
        return (plan_id if plan_id in DOCUMENT_LIMITS else 'free'), 'active'
    return 'free', 'inactive'


def count_documents_this_month(user_id, config_dict, now=None):
    """
    Count generated resumes and cover letters (those with a stored file)
    created since the start of the current month.
    """
    since = month_start_ms(now)
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()
    try:
        total = 0
        for table in ('resumes', 'cover_letters'):
            cursor.execute(
                f"SELECT COUNT(*) FROM {table} WHERE user_id = ? AND file_id IS NOT NULL AND created_at >= ?",
                (user_id, since),
            )
            total += cursor.fetchone()[0]
        return total
    finally:
        close_db_connection(conn)


def get_user_usage(user_id, config_dict):
    return {
        'documents_generated_this_month': count_documents_this_month(user_id, config_dict),
        'jobs_count': count_jobs(user_id, config_dict),
    }


def can_generate_document(user_id, config_dict):
    """
    Check the monthly document limit.

    Args:
        user_id (int): User, or None for anonymous callers
        config_dict (dict): Configuration dictionary

    Returns:
        dict: allowed, used, limit, plan_id and a reason when not allowed
    """
    if user_id is None:
        return {'allowed': False, 'used': 0, 'limit': 0, 'plan_id': 'free', 'reason': 'Not authenticated'}
    plan_id, _ = get_effective_plan(user_id, config_dict)
    limit = get_document_limit(plan_id)
    used = count_documents_this_month(user_id, config_dict)
    result = {'allowed': used < limit, 'used': used, 'limit': limit, 'plan_id': plan_id}
    if not result['allowed']:
        result['reason'] = 'Document limit reached'
    return result


def can_add_job(user_id, config_dict):
    """
    Check the job tracker limit.

    Args:
        user_id (int): User, or None for anonymous callers
        config_dict (dict): Configuration dictionary

    Returns:
        dict: allowed, used, limit (None when unlimited), plan_id, plan_label,
            subscription_status, upgrade_suggestion and a reason when not allowed
    """
    if user_id is None:
        return {
            'allowed': False, 'used': 0, 'limit': 0, 'plan_id': 'free', 'plan_label': PLAN_LABELS['free'],
            'subscription_status': None, 'upgrade_suggestion': None, 'reason': 'Not authenticated',
        }
    plan_id, subscription_status = get_effective_plan(user_id, config_dict)
    limit = get_job_limit(plan_id)
    used = count_jobs(user_id, config_dict)
    result = {
        'allowed': limit is None or used < limit,
        'used': used,
        'limit': limit,
        'plan_id': plan_id,
        'plan_label': PLAN_LABELS.get(plan_id, plan_id),
        'subscription_status': subscription_status,
        'upgrade_suggestion': UPGRADE_SUGGESTIONS.get(plan_id),
    }
    if not result['allowed']:
        result['reason'] = 'Job limit reached'
    return result


def job_limit_message(check):
    """User-facing message for a failed can_add_job check."""
    if check.get('subscription_status') == 'inactive':
        return (
            f"Your subscription isn’t active right now, so you’re currently limited to the "
            f"Free plan ({check['limit']} jobs)."
        )
    message = f"Your job tracker is full for your {check['plan_label']} plan ({check['limit']} jobs)."
    if check.get('upgrade_suggestion'):
        message += f" {check['upgrade_suggestion']}"
    return message


def document_limit_message(check):
    return (
        f"You've reached your limit of {check['limit']} documents this month. "
        f"Please upgrade your plan to continue generating documents."
    )


def get_usage_summary(user_id, config_dict):
    """
    Usage, limits and remaining allowance for the user.

    Returns:
        dict: plan_id, usage, limits, remaining and a one-line message
    """
    plan_id, subscription_status = get_effective_plan(user_id, config_dict)
    usage = get_user_usage(user_id, config_dict)
    document_limit = get_document_limit(plan_id)
    job_limit = get_job_limit(plan_id)
    documents_used = usage['documents_generated_this_month']
    jobs_used = usage['jobs_count']

    job_part = f"{jobs_used}/{job_limit}" if job_limit is not None else f"{jobs_used}"
    return {
        'plan_id': plan_id,
        'subscription_status': subscription_status,
        'usage': usage,
        'limits': {'documents_per_month': document_limit, 'jobs': job_limit},
        'remaining': {
            'documents_remaining': max(document_limit - documents_used, 0),
            'jobs_remaining': max(job_limit - jobs_used, 0) if job_limit is not None else None,
        },
        'message': f"Current usage: {documents_used}/{document_limit} documents this month, {job_part} jobs tracked.",
    }
