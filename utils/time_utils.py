"""
Time helpers. Stored timestamps are epoch milliseconds.
"""
import time
from datetime import datetime


def now_ms():
    return int(time.time() * 1000)


def month_start_ms(now=None):
    """Epoch ms of the 1st of the current month at 00:00 local time."""
    now = now or datetime.now()
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return int(start.timestamp() * 1000)


def format_generated_time(now=None):
    """Human readable stamp used in generated document names, e.g. 'Jun 10, 2025 03:04 PM'."""
    now = now or datetime.now()
    return f"{now.strftime('%b')} {now.day}, {now.year} {now.strftime('%I:%M %p')}"


def format_letter_date(now=None):
    """Date line for cover letters, e.g. 'June 10, 2025'."""
    now = now or datetime.now()
    return f"{now.strftime('%B')} {now.day}, {now.year}"
