"""
Chat Completion Client

Thin wrapper around an OpenAI-compatible /chat/completions endpoint (x.ai
Grok by default). Every call is bounded by a timeout; failures come back as
UpstreamFailure or Timeout, never as raw requests exceptions.
"""

import json
import logging
import re

import requests

from .errors import Timeout, UpstreamFailure

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


def extract_json(content):
    """Parse model output as JSON, tolerating a surrounding ``` fence."""
    text = FENCE_RE.sub('', (content or '').strip())
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Last resort: the outermost array or object in the text
    for opener, closer in (('[', ']'), ('{', '}')):
        start, end = text.find(opener), text.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end + 1])
            except json.JSONDecodeError:
                continue
    raise UpstreamFailure('Invalid JSON response from the recipe assistant')


class ChatClient:
    """Synchronous chat-completions client returning parsed JSON."""

    def __init__(self, api_key, base_url='https://api.x.ai/v1', model='grok-2-1212',
                 timeout=60, session=None):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('LLM_API_KEY'),
            base_url=config.get('LLM_BASE_URL', 'https://api.x.ai/v1'),
            model=config.get('LLM_MODEL', 'grok-2-1212'),
            timeout=config.get('LLM_TIMEOUT', 60),
        )

    def complete_json(self, system, prompt, temperature=0.7):
        """Send one system+user exchange and return the parsed JSON reply."""
        if not self.api_key:
            raise UpstreamFailure('The recipe assistant is not configured')

        payload = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system},
                {'role': 'user', 'content': prompt},
            ],
            'response_format': {'type': 'json_object'},
            'temperature': temperature,
        }
        logger.info("Chat request model=%s temperature=%s", self.model, temperature)
        logger.debug("Chat payload: %s", json.dumps(payload, ensure_ascii=False))

        try:
            response = self.session.post(
                f'{self.base_url}/chat/completions',
                headers={'Authorization': f'Bearer {self.api_key}',
                         'Content-Type': 'application/json'},
                json=payload,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.warning("Chat request timed out after %ss", self.timeout)
            raise Timeout('The recipe assistant took too long to respond') from e
        except requests.RequestException as e:
            logger.warning("Chat request failed: %s", e)
            raise UpstreamFailure('Could not reach the recipe assistant') from e

        logger.info("Chat response status=%s", response.status_code)
        if response.status_code != 200:
            logger.warning("Chat error body: %s", response.text[:500])
            raise UpstreamFailure(f'Recipe assistant error (HTTP {response.status_code})')

        try:
            content = response.json()['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamFailure('Unexpected response from the recipe assistant') from e
        if not content:
            raise UpstreamFailure('No content received from the recipe assistant')

        return extract_json(content)
