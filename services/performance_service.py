"""
Job hunt performance statistics and AI summaries.
"""
import logging

import pandas as pd

from services.usage_service import count_documents_this_month
from utils.db_utils import get_db_connection, close_db_connection
from utils.openrouter_utils import call_openrouter

logger = logging.getLogger(__name__)

STATS_STATUSES = ('Interested', 'Applied', 'Callback', 'Interviewing', 'Offered', 'Rejected', 'Ghosted')

SYSTEM_PROMPT = """You are a career coach analyzing a job seeker's performance. Given job hunt statistics, write a personalized, actionable 2-4 sentence summary.

Guidelines:
- Be encouraging but honest
- Focus on actionable insights (e.g., "Try tailoring your Software Engineer resume more" or "Your 15% response rate suggests stronger cover letters could help")
- Mention specific numbers when relevant
- Suggest 1-2 concrete next steps
- Keep it conversational and supportive
- If they have interviews or offers, acknowledge those wins
- If stats are low, focus on improvement opportunities

Return ONLY the summary text, no additional formatting or explanations."""


def _document_stats(df, column):
    """Per-document outcome counts for jobs that name a document in `column`."""
    used = df[df[column].notna() & (df[column].astype(str).str.strip() != '')]
    stats = {}
    for name, group in used.groupby(column):
        counts = group['status'].value_counts()
        stats[name] = {
            'total_jobs': int(len(group)),
            'offered': int(counts.get('Offered', 0)),
            'rejected': int(counts.get('Rejected', 0)),
            'ghosted': int(counts.get('Ghosted', 0)),
            'applied': int(counts.get('Applied', 0)),
            'interviewing': int(counts.get('Interviewing', 0)),
            'callback': int(counts.get('Callback', 0)),
        }
    return stats


def compute_job_stats(user_id, config_dict):
    """
    Aggregate the user's tracker into performance statistics.

    Args:
        user_id (int): User ID
        config_dict (dict): Configuration dictionary

    Returns:
        dict: total_jobs, status_counts, resume_stats, cover_letter_stats,
            documents_generated_this_month
    """
    conn = get_db_connection(config_dict=config_dict)
    try:
        df = pd.read_sql_query(
            "SELECT status, resume_used, cover_letter_used FROM jobs WHERE user_id = ?",
            conn,
            params=(user_id,),
        )
    finally:
        close_db_connection(conn)

    counts = df['status'].value_counts()
    return {
        'total_jobs': int(len(df)),
        'status_counts': {status: int(counts.get(status, 0)) for status in STATS_STATUSES},
        'resume_stats': _document_stats(df, 'resume_used'),
        'cover_letter_stats': _document_stats(df, 'cover_letter_used'),
        'documents_generated_this_month': count_documents_this_month(user_id, config_dict),
    }


def _performance_lines(heading, stats):
    if not stats:
        return ''
    lines = [
        f"- {name}: {data.get('total_jobs', 0)} jobs ({data.get('offered', 0)} offers, "
        f"{data.get('callback', 0)} callback, {data.get('interviewing', 0)} interviewing, "
        f"{data.get('rejected', 0)} rejected)"
        for name, data in stats.items()
    ]
    return f"{heading}:\n" + '\n'.join(lines)


def build_summary_prompt(stats):
    """
    Build the user prompt describing the stats.

    Args:
        stats (dict): Output of compute_job_stats, or client-posted stats of the same shape

    Returns:
        str: Prompt text
    """
    status_counts = stats.get('status_counts') or {}
    breakdown = '\n'.join(f"- {status}: {status_counts.get(status) or 0}" for status in STATS_STATUSES)
    documents = stats.get('documents_generated_this_month')
    return (
        "Analyze these job hunt stats and provide a personalized, actionable summary:\n\n"
        f"Total Jobs: {stats['total_jobs']}\n"
        f"Status Breakdown:\n{breakdown}\n\n"
        f"{_performance_lines('Resume Performance', stats.get('resume_stats'))}\n\n"
        f"{_performance_lines('Cover Letter Performance', stats.get('cover_letter_stats'))}\n\n"
        f"{f'Documents Generated This Month: {documents}' if documents else ''}"
    )


def generate_summary(stats, config_dict):
    """
    Ask the OpenRouter models for a short coaching summary.

    Returns:
        tuple: (summary text, model id that answered)
    """
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_summary_prompt(stats)},
    ]
    return call_openrouter(
        messages,
        config_dict['openrouter_api_key'],
        config_dict['openrouter_models'],
        temperature=0.7,
        max_tokens=500,
        referer=config_dict['app_url'],
    )
