"""
Input Sanitization Module

Cleans user input and data from external sources (imported pages, the
generative backend) before it is stored. The API serves JSON and the client
renders text, so markup is stripped rather than escaped.
"""

import html
import re
from urllib.parse import urlparse

CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
TAG_RE = re.compile(r'<[^>]*>')
SPACES_RE = re.compile(r'[ \t\r\f\v]+')

# Schemes that must never end up in an href or src
DANGEROUS_SCHEMES = {
    'javascript', 'data', 'vbscript', 'file',
    'blob', 'about', 'chrome', 'moz-extension'
}


def _clean(text):
    if text is None:
        return ''
    if not isinstance(text, str):
        text = str(text)
    text = html.unescape(text)
    text = TAG_RE.sub('', text)
    return CONTROL_CHARS_RE.sub('', text)


def sanitize_text(text, max_length=10000):
    """
    Single-line text: markup and control characters removed, whitespace
    collapsed, truncated to max_length.
    """
    text = _clean(text)
    text = re.sub(r'\s+', ' ', text).strip()
    if len(text) > max_length:
        text = text[:max_length].rstrip()
    return text


def sanitize_url(url):
    """
    Return the URL if it is a plain http(s) URL, else an empty string.

    Rejects javascript:, data: and other schemes that could execute code
    when used in href or src attributes.
    """
    if not url or not isinstance(url, str):
        return ''

    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return ''

    if parsed.scheme.lower() not in ('http', 'https') or not parsed.netloc:
        return ''

    url_lower = url.lower()
    for dangerous in DANGEROUS_SCHEMES:
        if dangerous + ':' in url_lower:
            return ''

    return url


def sanitize_recipe_name(name, max_length=200, default='Untitled Recipe'):
    """
    Sanitize a recipe name for storage.

    Args:
        name: The recipe name to sanitize
        max_length: Maximum allowed length (default 200)
        default: Returned when nothing is left after cleaning

    Returns:
        Sanitized recipe name
    """
    name = sanitize_text(name, max_length=max_length)
    return name or default


def sanitize_instructions(instructions, max_length=50000):
    """
    Sanitize recipe instructions.

    Keeps newlines for step formatting, collapses runs of spaces and drops
    blank lines.
    """
    text = _clean(instructions)
    lines = [SPACES_RE.sub(' ', line).strip() for line in text.split('\n')]
    text = '\n'.join(line for line in lines if line)
    if len(text) > max_length:
        text = text[:max_length] + '\n...(truncated)'
    return text


def sanitize_ingredient_text(text, max_length=500):
    """Sanitize a single ingredient line."""
    return sanitize_text(text, max_length=max_length)


def sanitize_tag(tag, max_length=50):
    """Preference tags: single line, short."""
    return sanitize_text(tag, max_length=max_length)
