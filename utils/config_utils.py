"""
Configuration utilities.
"""
import json
import os


DEFAULT_CONFIG = {
    "db_path": "jobkompass.db",
    "app_url": "https://jobkompass.com",
    "latex_compiler": "local",
    "latex_service_url": "",
    "pdflatex_path": "pdflatex",
    "latex_timeout": 60,
    "openai_api_key": "",
    "chat_model": "gpt-5-mini",
    "template_model": "gpt-4o-mini",
    "title_model": "gpt-4o-mini",
    "openrouter_api_key": "",
    "openrouter_models": ["arcee-ai/trinity-mini:free", "google/gemma-3-27b-it:free"],
    "openrouter_job_parse_model": "google/gemma-3-27b-it:free",
    "stripe_secret_key": "",
    "stripe_webhook_secret": "",
    "chat_stream_delay": 0.03,
    "max_pdf_size_bytes": 5 * 1024 * 1024,
}

# Environment variable -> config key
ENV_OVERRIDES = {
    "JOBKOMPASS_DB_PATH": "db_path",
    "APP_URL": "app_url",
    "LATEX_SERVICE_URL": "latex_service_url",
    "OPENAI_API_KEY": "openai_api_key",
    "OPENROUTER_API_KEY": "openrouter_api_key",
    "STRIPE_SECRET_KEY": "stripe_secret_key",
    "STRIPE_WEBHOOK_SECRET": "stripe_webhook_secret",
}

SECRET_KEYS = ("openai_api_key", "openrouter_api_key", "stripe_secret_key", "stripe_webhook_secret")


def load_config(file_name):
    """
    Load configuration from a JSON file, filling in defaults and
    applying environment overrides.

    Args:
        file_name (str): Path to the configuration JSON file

    Returns:
        dict: Configuration dictionary
    """
    config = dict(DEFAULT_CONFIG)
    if file_name and os.path.exists(file_name):
        with open(file_name, 'r', encoding='utf-8') as f:
            config.update(json.load(f))
    return apply_env_overrides(config)


def apply_env_overrides(config):
    """
    Override config values with environment variables where they are set.

    Args:
        config (dict): Configuration dictionary

    Returns:
        dict: The same dictionary, updated in place
    """
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    # A service URL in the environment implies the remote compiler
    if os.environ.get("LATEX_SERVICE_URL"):
        config["latex_compiler"] = "remote"
    return config


def public_config(config):
    """Config without secrets, safe to hand to clients."""
    return {k: v for k, v in config.items() if k not in SECRET_KEYS and k != "db_path"}
