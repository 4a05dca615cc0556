"""
SSRF Protection Module

Validates recipe page URLs before the importer fetches them, so a user
cannot point the server at localhost, private networks or non-http(s)
schemes. Redirects are followed by hand so every hop is validated, not
just the URL the user typed.
"""

import ipaddress
import socket
from urllib.parse import urljoin, urlparse

import requests

USER_AGENT = 'Mozilla/5.0 (compatible; MealPlannerRecipeImport/1.0)'
MAX_REDIRECTS = 5
REDIRECT_STATUSES = {301, 302, 303, 307, 308}

LOCALHOST_ALIASES = {'localhost', 'localhost.localdomain', '127.0.0.1', '::1', '0.0.0.0'}


class SSRFError(Exception):
    """Raised when a URL fails SSRF validation."""


def is_private_ip(ip_str):
    """True for anything that is not a public unicast address (unparseable counts as private)."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True
    return not ip.is_global or ip.is_multicast


def _resolved_addresses(hostname):
    infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    return {info[4][0] for info in infos}


def is_safe_url(url):
    """
    Validate that a URL is safe to fetch.

    Returns (is_safe, error_message) tuple.
    """
    if not url:
        return False, "Empty URL"

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return False, "Invalid URL format"

    if parsed.scheme not in ('http', 'https'):
        return False, f"Invalid scheme: {parsed.scheme or 'none'}. Only http and https are allowed."
    if not hostname:
        return False, "No hostname in URL"
    if hostname.lower() in LOCALHOST_ALIASES:
        return False, "Cannot access localhost"

    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        pass
    else:
        if is_private_ip(hostname):
            return False, f"Cannot access private/internal IP: {hostname}"
        return True, None

    try:
        addresses = _resolved_addresses(hostname)
    except socket.gaierror:
        return False, f"Cannot resolve hostname: {hostname}"

    blocked = sorted(a for a in addresses if is_private_ip(a))
    if blocked:
        return False, f"Hostname resolves to private/internal IP: {blocked[0]}"
    return True, None


def _read_limited(response, max_size):
    content_length = response.headers.get('content-length')
    if content_length and content_length.isdigit() and int(content_length) > max_size:
        response.close()
        raise SSRFError(f"Response too large: {content_length} bytes (max {max_size})")

    chunks = []
    size = 0
    for chunk in response.iter_content(chunk_size=8192):
        size += len(chunk)
        if size > max_size:
            response.close()
            raise SSRFError(f"Response exceeded maximum size of {max_size} bytes")
        chunks.append(chunk)
    return b''.join(chunks)


def safe_fetch(url, timeout=10, max_size=5 * 1024 * 1024, session=None):
    """
    GET url with SSRF checks on every redirect hop and a body size limit.

    Returns the final requests.Response with its body already read, so
    .text and .content work as usual.

    Raises:
        SSRFError: A hop failed validation, too many redirects, or the body is too large
        requests.RequestException: For network and HTTP errors
    """
    http = session or requests
    for _ in range(MAX_REDIRECTS + 1):
        ok, error = is_safe_url(url)
        if not ok:
            raise SSRFError(error)

        response = http.get(url, headers={'User-Agent': USER_AGENT}, timeout=timeout,
                            stream=True, allow_redirects=False)
        location = response.headers.get('location')
        if response.status_code in REDIRECT_STATUSES and location:
            response.close()
            url = urljoin(url, location)
            continue

        response.raise_for_status()
        response._content = _read_limited(response, max_size)
        return response

    raise SSRFError(f"Too many redirects (max {MAX_REDIRECTS})")
