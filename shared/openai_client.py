"""
Thin OpenAI Chat Completions caller.

One POST per call, no retries. Non-2xx responses raise ``OpenAIError`` with
the status code attached.
"""

from typing import List, Optional

import requests

OPENAI_CHAT_URL = 'https://api.openai.com/v1/chat/completions'
DEFAULT_TIMEOUT = 60


class OpenAIError(Exception):
    """Raised when the OpenAI API is unreachable or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def build_messages(user_prompt: str, system_prompt: Optional[str] = None) -> List[dict]:
    """Build a chat message list with an optional system prompt."""
    messages = []
    if system_prompt:
        messages.append({'role': 'system', 'content': system_prompt})
    messages.append({'role': 'user', 'content': user_prompt})
    return messages


def chat_completion(api_key: str, messages: List[dict], model: str = 'gpt-4o',
                    timeout: int = DEFAULT_TIMEOUT, **params) -> str:
    """
    Call the Chat Completions endpoint and return the first choice's text.

    Args:
        api_key: OpenAI API key
        messages: Chat messages (role/content dicts)
        model: Model name
        timeout: Request timeout in seconds
        **params: Extra body fields (temperature, max_tokens, top_p, ...)

    Raises:
        OpenAIError: key missing, network failure, or non-2xx response
    """
    if not api_key:
        raise OpenAIError('OpenAI API key not configured')

    body = {'model': model, 'messages': messages}
    body.update(params)

    try:
        response = requests.post(
            OPENAI_CHAT_URL,
            headers={
                'Authorization': f'Bearer {api_key}',
                'Content-Type': 'application/json',
            },
            json=body,
            timeout=timeout,
        )
    except requests.exceptions.Timeout:
        raise OpenAIError('OpenAI request timed out')
    except requests.exceptions.RequestException as e:
        raise OpenAIError(f'OpenAI request failed: {e}')

    if not response.ok:
        raise OpenAIError(f'OpenAI API error: {response.status_code}', response.status_code)

    data = response.json()
    try:
        content = data['choices'][0]['message']['content'] or ''
    except (KeyError, IndexError, TypeError):
        raise OpenAIError('OpenAI API returned no choices', response.status_code)
    return content.strip()
