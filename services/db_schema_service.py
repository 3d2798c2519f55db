"""
Database schema service layer.
"""
from utils.db_utils import get_db_connection, close_db_connection

TABLES = {
    "users": """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT,
            email TEXT NOT NULL UNIQUE,
            username TEXT,
            password_hash TEXT NOT NULL,
            resume_preferences TEXT,
            created_at INTEGER NOT NULL
        )
    """,
    "sessions": """
        CREATE TABLE IF NOT EXISTS sessions (
            token TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            created_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
    "jobs": """
        CREATE TABLE IF NOT EXISTS jobs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            company TEXT NOT NULL,
            title TEXT NOT NULL,
            link TEXT DEFAULT '',
            status TEXT DEFAULT 'Interested',
            compensation TEXT,
            keywords TEXT,
            skills TEXT,
            description TEXT,
            date_applied TEXT,
            interviewed INTEGER,
            easy_apply TEXT,
            resume_used TEXT,
            cover_letter_used TEXT,
            notes TEXT,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
    "resources": """
        CREATE TABLE IF NOT EXISTS resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            type TEXT DEFAULT 'resource',
            title TEXT NOT NULL,
            url TEXT NOT NULL,
            description TEXT,
            notes TEXT,
            tags TEXT,
            category TEXT,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
    "files": """
        CREATE TABLE IF NOT EXISTS files (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            file_name TEXT,
            content_type TEXT,
            size INTEGER,
            data BLOB NOT NULL,
            created_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
    "resumes": """
        CREATE TABLE IF NOT EXISTS resumes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            label TEXT,
            tags TEXT,
            template TEXT,
            content TEXT,
            file_id INTEGER,
            file_name TEXT,
            file_type TEXT,
            file_size INTEGER,
            is_active INTEGER DEFAULT 1,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id),
            FOREIGN KEY (file_id) REFERENCES files(id)
        )
    """,
    "cover_letters": """
        CREATE TABLE IF NOT EXISTS cover_letters (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            content TEXT,
            template TEXT,
            company TEXT,
            position TEXT,
            file_id INTEGER,
            file_name TEXT,
            file_size INTEGER,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id),
            FOREIGN KEY (file_id) REFERENCES files(id)
        )
    """,
    "email_templates": """
        CREATE TABLE IF NOT EXISTS email_templates (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            name TEXT NOT NULL,
            subject TEXT,
            body TEXT,
            type TEXT,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
    "subscriptions": """
        CREATE TABLE IF NOT EXISTS subscriptions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            stripe_subscription_id TEXT NOT NULL UNIQUE,
            stripe_customer_id TEXT,
            plan_id TEXT NOT NULL DEFAULT 'free',
            status TEXT NOT NULL,
            current_period_start INTEGER,
            current_period_end INTEGER,
            trial_end INTEGER,
            cancel_at_period_end INTEGER DEFAULT 0,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
    "referrals": """
        CREATE TABLE IF NOT EXISTS referrals (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            referrer_user_id INTEGER NOT NULL,
            referred_email TEXT NOT NULL,
            referred_user_id INTEGER,
            status TEXT NOT NULL DEFAULT 'pending',
            reward_granted INTEGER DEFAULT 0,
            created_at INTEGER NOT NULL,
            FOREIGN KEY (referrer_user_id) REFERENCES users(id)
        )
    """,
    "threads": """
        CREATE TABLE IF NOT EXISTS threads (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL,
            title TEXT NOT NULL,
            created_at INTEGER NOT NULL,
            updated_at INTEGER NOT NULL,
            last_message_at INTEGER NOT NULL,
            message_count INTEGER NOT NULL DEFAULT 0
        )
    """,
    "messages": """
        CREATE TABLE IF NOT EXISTS messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            thread_id INTEGER NOT NULL,
            username TEXT NOT NULL,
            role TEXT NOT NULL,
            content TEXT NOT NULL,
            tool_calls TEXT,
            created_at INTEGER NOT NULL,
            FOREIGN KEY (thread_id) REFERENCES threads(id)
        )
    """,
    "contacts": """
        CREATE TABLE IF NOT EXISTS contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            subject TEXT NOT NULL,
            message TEXT NOT NULL,
            ip_address TEXT,
            user_agent TEXT,
            created_at INTEGER NOT NULL
        )
    """,
    "email_list": """
        CREATE TABLE IF NOT EXISTS email_list (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL,
            name TEXT,
            submission_type TEXT NOT NULL,
            created_at INTEGER NOT NULL,
            UNIQUE (email, submission_type)
        )
    """,
    "waitlist": """
        CREATE TABLE IF NOT EXISTS waitlist (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            created_at INTEGER NOT NULL
        )
    """,
    "free_resume_generations": """
        CREATE TABLE IF NOT EXISTS free_resume_generations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT,
            input_type TEXT NOT NULL,
            text_character_count INTEGER NOT NULL DEFAULT 0,
            pdf_size_bytes INTEGER,
            template_id TEXT NOT NULL,
            created_at INTEGER NOT NULL
        )
    """,
    "extension_api_keys": """
        CREATE TABLE IF NOT EXISTS extension_api_keys (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            key TEXT NOT NULL UNIQUE,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at INTEGER NOT NULL,
            last_used_at INTEGER,
            FOREIGN KEY (user_id) REFERENCES users(id)
        )
    """,
}

# Columns added after the first release: table -> [(column, definition)]
MIGRATIONS = {
    "threads": [("context_window_exceeded", "INTEGER DEFAULT 0")],
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_jobs_user ON jobs(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_resources_user ON resources(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_resumes_user ON resumes(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_cover_letters_user ON cover_letters(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_subscriptions_user ON subscriptions(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_threads_username ON threads(username, updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_messages_thread ON messages(thread_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_contacts_email ON contacts(email)",
    "CREATE INDEX IF NOT EXISTS idx_free_resume_email ON free_resume_generations(email)",
]


def verify_db_schema(config_dict, verbose=True):
    """
    Verify and update database schema to ensure all required columns and tables exist.

    Args:
        config_dict (dict): Configuration dictionary
        verbose (bool): Print a line per verified table

    Returns:
        None
    """
    conn = get_db_connection(config_dict=config_dict)
    cursor = conn.cursor()

    try:
        for table_name, ddl in TABLES.items():
            cursor.execute(ddl)
            conn.commit()
            if verbose:
                print(f"Verified {table_name} table exists")

        for table_name, columns in MIGRATIONS.items():
            cursor.execute(f"PRAGMA table_info({table_name})")
            column_names = [column[1] for column in cursor.fetchall()]
            for column, definition in columns:
                if column not in column_names:
                    cursor.execute(f"ALTER TABLE {table_name} ADD COLUMN {column} {definition}")
                    conn.commit()
                    print(f"Added {column} column to {table_name} table")

        for ddl in INDEXES:
            cursor.execute(ddl)
        conn.commit()
    finally:
        close_db_connection(conn)
