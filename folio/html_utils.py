"""HTML utility functions for Folio.

This module focuses exclusively on HTML string manipulation.

Functions:
    escape_code: Escape text for use as element content, leaving quotes alone.
    escape_html: Escape special HTML characters in a string.
    join_root_url: Join a base URL with a path.
"""

from __future__ import annotations


def escape_code(text: str) -> str:
    """Escape text so it can sit inside ``<code>`` without being parsed as markup.

    Only ``&``, ``<`` and ``>`` are replaced. Quotes, whitespace and every
    other character are left exactly as they are.

    Examples:
        >>> escape_code('dict[@"goodbye!"] = nil;')
        'dict[@"goodbye!"] = nil;'

        >>> escape_code("if (a < b && c > d)")
        'if (a &lt; b &amp;&amp; c &gt; d)'
    """
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_html(text: str) -> str:
    """Escape special HTML characters in a string.

    Converts the following characters to their HTML entity equivalents:
    - & becomes &amp;
    - < becomes &lt;
    - > becomes &gt;
    - " becomes &quot;

    Args:
        text: The string to escape.

    Returns:
        The escaped string, safe for inclusion in HTML attributes and XML.

    Examples:
        >>> escape_html('<script>alert("XSS")</script>')
        '&lt;script&gt;alert(&quot;XSS&quot;)&lt;/script&gt;'

        >>> escape_html('Tom & Jerry')
        'Tom &amp; Jerry'
    """
    return escape_code(text).replace('"', "&quot;")


def join_root_url(root_url: str, path: str) -> str:
    """Safely join a root URL and a path, avoiding double slashes.

    Args:
        root_url: Base URL (e.g., https://example.com/blog).
        path: Path beginning with or without a leading slash.

    Returns:
        Combined URL with proper slash handling.

    Examples:
        >>> join_root_url('https://example.com', '/about')
        'https://example.com/about'

        >>> join_root_url('https://example.com/', 'about')
        'https://example.com/about'
    """
    if not root_url:
        return path
    base = root_url.rstrip("/")
    suffix = path if path.startswith("/") else f"/{path}"
    return f"{base}{suffix}"
