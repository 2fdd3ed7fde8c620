"""Target URL resolution and normalization.

The query string is scanned as raw text instead of being parsed, so a target
such as ``?target=https://host/path?a=1`` survives without being encoded. The
price is that a literal ``&`` inside an unencoded target ends the target value
and the rest is forwarded as extra parameters.
"""

import re
from urllib.parse import unquote_plus

from core.exceptions import InvalidEncoding

PROXY_PREFIX = "/proxy/"
TARGET_PARAM = "target="
DEFAULT_SCHEME = "https://"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def resolve_target(path: str, raw_query: str) -> str:
    """Return the raw target string, or "" when the request names none."""
    start = raw_query.find(TARGET_PARAM)
    if start == -1:
        if path.startswith(PROXY_PREFIX):
            return path[len(PROXY_PREFIX):]
        return ""

    value = raw_query[start + len(TARGET_PARAM):]
    end = value.find("&")
    if end != -1:
        value = value[:end]
    return value


def decode_target(raw: str) -> str:
    """Query-unescape the target (``+`` is a space)."""
    if _BAD_ESCAPE.search(raw):
        raise InvalidEncoding("Invalid URL encoding in target")
    return unquote_plus(raw, errors="replace")


def ensure_scheme(url: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return DEFAULT_SCHEME + url


def extra_query(raw_query: str) -> str:
    """Inbound query parameters other than the target, in original order."""
    parts = [
        part
        for part in raw_query.split("&")
        if part and not part.startswith(TARGET_PARAM)
    ]
    return "&".join(parts)


def build_final_url(decoded_url: str, raw_query: str) -> str:
    """Append the extra inbound parameters to the target's own query."""
    extra = extra_query(raw_query)
    if not extra:
        return decoded_url
    separator = "&" if "?" in decoded_url else "?"
    return decoded_url + separator + extra


def extract_host(url: str) -> str:
    """Authority component of an absolute URL ("" if there is no ``://``)."""
    start = url.find("://")
    if start == -1:
        return ""
    authority = url[start + 3:]
    for delimiter in ("/", "?", "#"):
        authority = authority.split(delimiter, 1)[0]
    return authority
