"""Utility functions for Folio.

This module contains string processing, path handling and date helpers used
throughout the Folio codebase.

Key functions:
    slugify: Convert filenames to URL slugs.
    extract_date_from_name: Extract date from filename prefix.
    coerce_date: Turn a front-matter date value into a naive datetime.
    first_paragraph: Extract a short description from Markdown text.
    is_markdown: Check if a path is a Markdown file.
    is_draft_path: Check if a path marks a draft.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from datetime import date, datetime, time, timezone
from pathlib import Path

from dateutil import parser as date_parser

CONTENT_DIRS = ("_posts", "_drafts")


def slugify(name: str) -> str:
    """Convert filename (without extension) to slug, dropping date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug.

    Examples:
        >>> slugify("2015-11-14-nothing")
        'nothing'
    """
    cleaned = name
    if "-" in cleaned:
        parts = cleaned.split("-")
        if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
            cleaned = "-".join(parts[3:])
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", cleaned)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def extract_date_from_name(name: str) -> datetime | None:
    """Extract a date from a filename with YYYY-MM-DD prefix.

    Args:
        name: Filename stem (without extension).

    Returns:
        datetime object if a valid date prefix is found, None otherwise.

    Examples:
        >>> extract_date_from_name("2015-11-14-nothing")
        datetime.datetime(2015, 11, 14, 0, 0)

        >>> extract_date_from_name("nothing") is None
        True
    """
    parts = name.lstrip("_").split("-")
    if len(parts) >= 3 and all(p.isdigit() for p in parts[:3]):
        try:
            return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
        except ValueError:
            return None
    return None


def coerce_date(value: object) -> datetime:
    """Convert a front-matter date value to a naive datetime.

    YAML hands back ``date`` or ``datetime`` objects for unquoted values and
    strings for anything it does not recognize (e.g. Jekyll's
    ``2015-11-14 12:00:00 -0800``). Strings are read as ISO 8601 first and
    then with dateutil's general parser. Aware datetimes are converted to UTC
    and stripped of their tzinfo so every date in a site can be compared.

    Args:
        value: A date, datetime or string.

    Returns:
        Naive datetime.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime.combine(value, time())
    elif isinstance(value, str):
        result = _parse_date_string(value.strip())
    else:
        raise ValueError(f"unsupported date value: {value!r}")
    if result.tzinfo is not None:
        result = result.astimezone(timezone.utc).replace(tzinfo=None)
    return result


def _parse_date_string(text: str) -> datetime:
    if not text:
        raise ValueError("empty date")
    try:
        return date_parser.isoparse(text)
    except (ValueError, OverflowError):
        pass
    try:
        return date_parser.parse(text, dayfirst=False)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"unrecognized date: {text!r}") from exc


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first prose paragraph from Markdown text.

    Skips headings, images and code fences, strips HTML tags and collapses
    whitespace.

    Args:
        text: Text content to extract from.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to limit characters.
    """
    paragraphs = [p.strip() for p in text.split("\n\n") if p.strip()]
    for para in paragraphs:
        if para.startswith(("#", "![", "```", "~~~", "---")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        para = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", para)
        collapsed = " ".join(para.split())
        return collapsed[:limit]
    return ""


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)


def is_internal_path(path: Path) -> bool:
    """Check if a path has a component starting with ``_`` or ``.``.

    Layout directories (``_layouts``) and hidden directories are internal.
    The Jekyll-style ``_posts`` and ``_drafts`` directories are not.

    Args:
        path: Path to check.

    Returns:
        True if any path component starts with an underscore or a dot.
    """
    return any(
        part.startswith(("_", ".")) and part not in CONTENT_DIRS for part in path.parts
    )


def is_markdown(path: Path) -> bool:
    """Check if a path is a Markdown file.

    Args:
        path: Path to check.

    Returns:
        True if the file has .md or .markdown extension (case-insensitive).
    """
    return path.suffix.lower() in (".md", ".markdown")


def is_draft_path(path: Path) -> bool:
    """Check if a source path marks a draft.

    Files whose name starts with an underscore and files inside a
    ``_drafts`` directory are drafts regardless of their front-matter.
    """
    return path.name.startswith("_") or path.parent.name == "_drafts"
