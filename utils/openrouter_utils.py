"""
OpenRouter (OpenAI-compatible) chat completion helper.
"""
import json
import logging
import re
import time

import requests

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
RETRYABLE_STATUS_CODES = (429, 502, 503)


class OpenRouterError(Exception):
    """Raised when OpenRouter does not return a usable completion."""

    def __init__(self, status_code, text):
        super().__init__(f"AI request failed: {status_code} {text}".strip())
        self.status_code = status_code
        self.text = text


def _post_completion(api_key, model, messages, temperature, max_tokens, referer, extra, title=None):
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": referer,
    }
    if title:
        headers["X-Title"] = title
    payload = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if extra:
        payload.update(extra)
    return requests.post(OPENROUTER_URL, json=payload, headers=headers, timeout=120)


def message_text(message_content):
    """Some models return content as a list of parts; join the text parts."""
    if isinstance(message_content, str):
        return message_content.strip()
    if isinstance(message_content, list):
        parts = [
            part.get('text', '') for part in message_content
            if isinstance(part, dict) and part.get('type') == 'text' and isinstance(part.get('text'), str)
        ]
        return ' '.join(parts).strip()
    return ''


def call_openrouter(messages, api_key, models, temperature=0.7, max_tokens=1000,
                    referer='https://jobkompass.com', extra=None, retry_delay=2, fallback_delay=1,
                    title=None):
    """
    Call OpenRouter with a primary model, retrying once and then falling
    back to the secondary model on rate limits and gateway errors.

    Args:
        messages (list): Chat messages
        api_key (str): OpenRouter API key
        models (list): [primary, fallback] model ids
        temperature (float): Sampling temperature
        max_tokens (int): Completion token cap
        referer (str): Value for the HTTP-Referer header
        extra (dict): Extra payload fields (e.g. plugins)
        retry_delay (float): Seconds to wait before retrying the primary model
        fallback_delay (float): Seconds to wait before trying the fallback model
        title (str): Optional X-Title header identifying the caller

    Returns:
        tuple: (content text, model id that answered)

    Raises:
        OpenRouterError: If every attempt fails or the answer is empty
    """
    primary = models[0]
    fallback = models[1] if len(models) > 1 else models[0]

    model_used = primary
    response = _post_completion(api_key, primary, messages, temperature, max_tokens, referer, extra, title)
    if response.status_code in RETRYABLE_STATUS_CODES:
        logger.warning(f"OpenRouter returned {response.status_code} for {primary}, retrying")
        time.sleep(retry_delay)
        response = _post_completion(api_key, primary, messages, temperature, max_tokens, referer, extra, title)
    if response.status_code in RETRYABLE_STATUS_CODES:
        logger.warning(f"OpenRouter returned {response.status_code} for {primary}, falling back to {fallback}")
        time.sleep(fallback_delay)
        model_used = fallback
        response = _post_completion(api_key, fallback, messages, temperature, max_tokens, referer, extra, title)

    if response.status_code != 200:
        logger.error(f"OpenRouter API error: {response.status_code} - {response.text[:500]}")
        raise OpenRouterError(response.status_code, response.text)

    data = response.json()
    choices = data.get("choices") or [{}]
    content = message_text((choices[0].get("message") or {}).get("content"))
    if not content:
        raise OpenRouterError(response.status_code, "AI did not return valid content")
    return content, model_used


def strip_think_tags(text):
    return re.sub(r'<think>[\s\S]*?</think>', '', text or '', flags=re.IGNORECASE).strip()


def extract_json_payload(text):
    """
    Parse JSON out of a model answer, tolerating <think> blocks and
    markdown code fences.

    Args:
        text (str): Raw model output

    Returns:
        The parsed JSON value

    Raises:
        ValueError: If no valid JSON can be parsed
    """
    cleaned = strip_think_tags(text)
    match = re.search(r'```(?:json)?\s*([\s\S]*?)```', cleaned)
    if match:
        cleaned = match.group(1).strip()
    return json.loads(cleaned)
