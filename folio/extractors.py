"""Front-matter parsing and metadata extractors for Folio.

Every source document opens with a YAML front-matter block between ``---``
lines. ``split_frontmatter`` separates that block from the body, and a set of
small extractors each derive one piece of metadata from it.

Key classes:
- TitleExtractor: Requires a non-blank ``title``.
- DateExtractor: Reads ``date`` or falls back to the filename / file mtime.
- LayoutExtractor: Reads ``layout`` with a configurable default.
- SlugExtractor: Reads ``slug`` or derives it from the filename.
- TagExtractor: Reads ``tags`` as a string or a list.
- DescriptionExtractor: Takes the first paragraph of the body.
- CompositeMetadataExtractor: Runs all of the above and merges results.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import ParseError
from .utils import (
    coerce_date,
    extract_date_from_name,
    first_paragraph,
    is_draft_path,
    slugify,
)

OPENING_DELIMITER = "---"
CLOSING_DELIMITERS = ("---", "...")
TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0", "")


def split_frontmatter(text: str, path: Path | None = None) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from the body of a document.

    Args:
        text: Raw file content.
        path: Path to the source file, used in error messages.

    Returns:
        Tuple of (front-matter dict, body text). The body starts right after
        the closing delimiter line and is otherwise untouched.

    Raises:
        ParseError: If either delimiter is missing, the YAML is invalid, or
            the block is not a mapping.
    """
    lines = text.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPENING_DELIMITER:
        raise ParseError("missing opening front-matter delimiter '---'", path)
    for index in range(1, len(lines)):
        if lines[index].rstrip() in CLOSING_DELIMITERS:
            break
    else:
        raise ParseError("missing closing front-matter delimiter '---'", path)

    block = "".join(lines[1:index])
    try:
        data = yaml.safe_load(block)
    except (yaml.YAMLError, ValueError) as exc:
        raise ParseError(f"invalid YAML in front-matter: {exc}", path) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("front-matter must be a mapping of keys to values", path)
    return data, "".join(lines[index + 1 :])


class TitleExtractor:
    """Extracts the required title."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        title = frontmatter.get("title")
        if title is None or not str(title).strip():
            raise ParseError("missing required front-matter field 'title'", path)
        return {"title": str(title).strip()}


class DateExtractor:
    """Extracts the publication date.

    Uses ``date`` from the front-matter when present, then a YYYY-MM-DD
    filename prefix, then the file modification time.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        """Extract the date.

        Args:
            frontmatter: Parsed front-matter.
            body: Document body (unused).
            path: Path to the source file.

        Returns:
            Dictionary with 'date' key holding a naive datetime.

        Raises:
            ParseError: If an explicit date cannot be parsed.
        """
        value = frontmatter.get("date")
        if value is not None:
            try:
                return {"date": coerce_date(value)}
            except ValueError as exc:
                raise ParseError(f"invalid date: {exc}", path) from exc
        date = extract_date_from_name(path.stem)
        if date is None:
            date = datetime.fromtimestamp(path.stat().st_mtime)
        return {"date": date}


class LayoutExtractor:
    """Extracts the layout name, falling back to a default."""

    def __init__(self, default: str = "post"):
        self.default = default

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        layout = frontmatter.get("layout") or self.default
        return {"layout": str(layout)}


class SlugExtractor:
    """Extracts the document identifier.

    An explicit ``slug`` is normalized with the same rules as filenames, so
    ``slug: "Nothing At All"`` becomes ``nothing-at-all``.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        explicit = frontmatter.get("slug")
        if explicit is not None and str(explicit).strip():
            return {"slug": slugify(str(explicit))}
        return {"slug": slugify(path.stem.lstrip("_"))}


class TagExtractor:
    """Extracts tags given either as a list or a space/comma separated string."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        raw = frontmatter.get("tags") or []
        if isinstance(raw, str):
            raw = raw.replace(",", " ").split()
        if not isinstance(raw, list):
            raise ParseError("'tags' must be a string or a list", path)
        tags: list[str] = []
        for tag in raw:
            text = str(tag).strip()
            if text and text not in tags:
                tags.append(text)
        return {"tags": tags}


class DraftExtractor:
    """Marks a document as draft.

    A document is a draft when its front-matter says so, its filename starts
    with an underscore, or it lives in a ``_drafts`` directory. Quoted values
    such as ``draft: "false"`` are read as booleans.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        value = frontmatter.get("draft", False)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in TRUE_STRINGS:
                value = True
            elif text in FALSE_STRINGS:
                value = False
            else:
                raise ParseError(f"'draft' must be true or false, not {value!r}", path)
        return {"draft": bool(value) or is_draft_path(path)}


class DescriptionExtractor:
    """Extracts a short description.

    Prefers an explicit ``description`` and falls back to the first prose
    paragraph of the body, truncated to 160 characters.
    """

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        explicit = frontmatter.get("description")
        if explicit:
            return {"description": " ".join(str(explicit).split())}
        return {"description": first_paragraph(body)}


class PermalinkExtractor:
    """Extracts an optional permalink override."""

    def extract(self, frontmatter: dict[str, Any], body: str, path: Path) -> dict[str, Any]:
        permalink = frontmatter.get("permalink")
        if permalink is None:
            return {"permalink": None}
        text = str(permalink).strip()
        if ".." in text.split("/"):
            raise ParseError(f"permalink {text!r} may not contain '..'", path)
        if not text.startswith("/"):
            text = f"/{text}"
        return {"permalink": text}


class CompositeMetadataExtractor:
    """Combines multiple metadata extractors.

    Runs every registered extractor on a document's front-matter and body and
    merges their results. Later extractors can override earlier ones.
    """

    def __init__(self, extractors: list | None = None, default_layout: str = "post"):
        """Initialize with a list of extractors.

        Args:
            extractors: List of extractor implementations. If None, uses
                the default extractors.
            default_layout: Layout used when the front-matter names none.
        """
        if extractors is None:
            self._extractors = [
                TitleExtractor(),
                SlugExtractor(),
                DateExtractor(),
                LayoutExtractor(default_layout),
                TagExtractor(),
                DraftExtractor(),
                DescriptionExtractor(),
                PermalinkExtractor(),
            ]
        else:
            self._extractors = list(extractors)

    def add_extractor(self, extractor) -> None:
        self._extractors.append(extractor)

    def extract(self, text: str, path: Path) -> dict[str, Any]:
        """Split front-matter from ``text`` and extract all metadata.

        Args:
            text: Raw file content.
            path: Path to the source file.

        Returns:
            Dictionary with all extracted metadata plus 'frontmatter' and
            'body' keys.

        Raises:
            ParseError: If the front-matter is malformed or a field is invalid.
        """
        frontmatter, body = split_frontmatter(text, path)
        result: dict[str, Any] = {"frontmatter": frontmatter, "body": body}
        for extractor in self._extractors:
            result.update(extractor.extract(frontmatter, body, path))
        return result
