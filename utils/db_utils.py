"""
Database connection utilities.
"""
import json
import sqlite3
import pandas as pd
from utils.config_utils import load_config


def get_db_connection(config_path='config.json', config_dict=None):
    """
    Get a database connection using the configuration.

    Args:
        config_path (str): Path to config file (if config_dict not provided)
        config_dict (dict): Configuration dictionary (optional, overrides config_path)

    Returns:
        sqlite3.Connection: Database connection object
    """
    if config_dict is None:
        config = load_config(config_path)
    else:
        config = config_dict

    return sqlite3.connect(config["db_path"])


def close_db_connection(conn):
    """
    Close a database connection.

    Args:
        conn (sqlite3.Connection): Database connection to close
    """
    if conn:
        conn.close()


def rows_to_dicts(cursor, rows):
    """Map fetched rows to dictionaries keyed by column name."""
    columns = [column[0] for column in cursor.description]
    return [dict(zip(columns, row)) for row in rows]


def fetch_one_dict(cursor):
    """Fetch a single row as a dictionary, or None."""
    row = cursor.fetchone()
    if row is None:
        return None
    return rows_to_dicts(cursor, [row])[0]


def to_json(value):
    """Serialize a list/dict column value; None stays NULL."""
    if value is None:
        return None
    return json.dumps(value)


def from_json(value, default=None):
    """Deserialize a JSON column value."""
    if value is None or value == '':
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default


def read_records(conn, query, params=(), json_columns=(), json_defaults=None):
    """
    Run a list query through pandas and return plain dict records.

    Args:
        conn (sqlite3.Connection): Open connection
        query (str): SQL query
        params (tuple): Query parameters
        json_columns (tuple): Columns holding JSON text to decode
        json_defaults (dict): Per-column default for NULL JSON values

    Returns:
        list: List of row dictionaries, NaN replaced with None
    """
    df = pd.read_sql_query(query, conn, params=params)
    df = df.astype(object).where(pd.notnull(df), None)
    records = df.to_dict('records')
    defaults = json_defaults or {}
    for record in records:
        for column in json_columns:
            if column in record:
                record[column] = from_json(record[column], default=defaults.get(column))
    return records
