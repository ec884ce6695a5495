"""Content store for Folio.

This module loads source files into Document objects and splits document
bodies into ordered text and code segments.

Key classes:
- Document: Dataclass representing one loaded post.
- TextSegment / CodeBlock: The two kinds of body segment.
- FileContentLoader: Discovers source files under a directory.
- DocumentBuilder: Builds a Document from one source file.
- ContentStore: Facade that loads every document from a source.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Union

from .errors import ParseError, RenderError
from .extractors import CompositeMetadataExtractor
from .utils import is_draft_path, is_internal_path, is_markdown, slugify

logger = logging.getLogger(__name__)

OPEN_FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSE_FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")


@dataclass
class TextSegment:
    """A run of Markdown text between code fences.

    Attributes:
        text: Markdown source, newlines included.
        line: 1-based body line where the segment starts.
    """

    text: str
    line: int = 1


@dataclass
class CodeBlock:
    """A fenced code sample, kept exactly as written.

    Attributes:
        language: First word of the fence info string, or "".
        content: Lines between the fences, each with its newline.
        info: Full info string after the opening fence.
        fence: The opening fence characters (e.g. "```").
        indent: Leading spaces before the opening fence.
        line: 1-based body line of the opening fence.
    """

    language: str
    content: str
    info: str = ""
    fence: str = "```"
    indent: str = ""
    line: int = 1


Segment = Union[TextSegment, CodeBlock]


def split_segments(body: str, path: Path | None = None) -> list[Segment]:
    """Split a Markdown body into text segments and code blocks.

    Code block content is everything between the opening and closing fence
    lines, untouched: indentation, tabs and trailing whitespace survive.

    Args:
        body: Markdown body text.
        path: Source path, used in error messages.

    Returns:
        Segments in source order. Empty text runs are omitted.

    Raises:
        RenderError: If a code fence is opened and never closed.
    """
    segments: list[Segment] = []
    lines = body.splitlines(keepends=True)
    text_lines: list[str] = []
    text_start = 1
    index = 0
    while index < len(lines):
        line = lines[index]
        opening = _match_open_fence(line)
        if opening is None:
            text_lines.append(line)
            index += 1
            continue

        if text_lines:
            segments.append(TextSegment("".join(text_lines), text_start))
            text_lines = []
        indent, fence, info = opening
        open_line = index + 1
        close_index = _find_close_fence(lines, index + 1, fence)
        if close_index is None:
            raise RenderError(f"unclosed code fence '{fence}'", path, line=open_line)
        segments.append(
            CodeBlock(
                language=info.split()[0] if info else "",
                content="".join(lines[index + 1 : close_index]),
                info=info,
                fence=fence,
                indent=indent,
                line=open_line,
            )
        )
        index = close_index + 1
        text_start = index + 1

    if text_lines:
        segments.append(TextSegment("".join(text_lines), text_start))
    return segments


def _match_open_fence(line: str) -> tuple[str, str, str] | None:
    match = OPEN_FENCE_RE.match(line.rstrip("\r\n"))
    if not match:
        return None
    fence = match.group("fence")
    info = match.group("info").strip()
    # Backtick fences may not carry backticks in their info string.
    if fence[0] == "`" and "`" in info:
        return None
    return match.group("indent"), fence, info


def _find_close_fence(lines: list[str], start: int, fence: str) -> int | None:
    for index in range(start, len(lines)):
        match = CLOSE_FENCE_RE.match(lines[index].rstrip("\r\n"))
        if not match:
            continue
        candidate = match.group("fence")
        if candidate[0] == fence[0] and len(candidate) >= len(fence):
            return index
    return None


@dataclass
class Document:
    """A loaded post.

    Attributes:
        slug: Unique identifier, also used in permalinks.
        title: Human-readable title.
        date: Publication date (naive datetime).
        layout: Name of the layout template.
        body: Markdown body following the front-matter.
        path: Path to the source file.
        frontmatter: Every front-matter key, including unknown ones.
        tags: Tags from the front-matter.
        draft: Whether the post is a draft.
        description: Short description for indexes and feeds.
        permalink: Explicit permalink override, if any.
    """

    slug: str
    title: str
    date: datetime
    layout: str
    body: str
    path: Path
    frontmatter: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    draft: bool = False
    description: str = ""
    permalink: str | None = None

    @property
    def identifier(self) -> str:
        return self.slug

    def segments(self) -> list[Segment]:
        """Split the body into text and code segments.

        Raises:
            RenderError: If the body has an unclosed code fence.
        """
        return split_segments(self.body, self.path)


class FileContentLoader:
    """Discovers source files.

    Attributes:
        source: A directory to search, or a single source file.
    """

    def __init__(self, source: Path):
        self.source = source

    def iter_files(self) -> list[Path]:
        """Return every Markdown file under the source, sorted by path.

        Directories whose name starts with ``_`` or ``.`` (such as
        ``_layouts``) are skipped. A single-file source is returned as is.
        """
        if self.source.is_file():
            return [self.source]
        if not self.source.is_dir():
            raise FileNotFoundError(f"No such source: {self.source}")
        files: list[Path] = []
        for path in sorted(self.source.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.source)
            if is_internal_path(rel.parent):
                continue
            if is_markdown(path):
                files.append(path)
        return files


class DocumentBuilder:
    """Builds Document objects from source files.

    Attributes:
        metadata_extractor: Composite extractor run on each file.
    """

    def __init__(
        self,
        metadata_extractor: CompositeMetadataExtractor | None = None,
        default_layout: str = "post",
    ):
        self.metadata_extractor = metadata_extractor or CompositeMetadataExtractor(
            default_layout=default_layout
        )

    def build(self, path: Path) -> Document:
        """Build a Document from a source file.

        Args:
            path: Path to the source file.

        Returns:
            Document object.

        Raises:
            ParseError: If the file is unreadable or its front-matter is
                malformed or incomplete.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"not valid UTF-8 text: {exc.reason} at byte {exc.start}", path) from exc
        except OSError as exc:
            raise ParseError(f"cannot read file: {exc.strerror or exc}", path) from exc
        metadata = self.metadata_extractor.extract(text, path)
        return Document(
            slug=metadata["slug"],
            title=metadata["title"],
            date=metadata["date"],
            layout=metadata["layout"],
            body=metadata["body"],
            path=path,
            frontmatter=metadata["frontmatter"],
            tags=metadata.get("tags", []),
            draft=metadata.get("draft", False),
            description=metadata.get("description", ""),
            permalink=metadata.get("permalink"),
        )


ErrorHandler = Callable[[Path, str, ParseError], None]


class ContentStore:
    """Loads Document objects from a source directory or file.

    Attributes:
        default_layout: Layout given to documents without one.
    """

    def __init__(
        self,
        default_layout: str = "post",
        document_builder: DocumentBuilder | None = None,
    ):
        self.default_layout = default_layout
        self._document_builder = document_builder or DocumentBuilder(
            default_layout=default_layout
        )

    def load(
        self,
        source: Path,
        include_drafts: bool = False,
        on_error: ErrorHandler | None = None,
    ) -> list[Document]:
        """Load every document under ``source``.

        Args:
            source: Source directory or single file.
            include_drafts: Whether to keep draft documents.
            on_error: Called as ``on_error(path, identifier, error)`` for each
                file that fails to load; the file is then skipped. When
                omitted, the first ParseError propagates.

        Returns:
            Documents in source path order.

        Raises:
            ParseError: If a file fails to load and no ``on_error`` is given.
        """
        documents: list[Document] = []
        seen: dict[str, Path] = {}
        for path in FileContentLoader(source).iter_files():
            if not include_drafts and is_draft_path(path):
                logger.debug("Skipping draft %s", path)
                continue
            try:
                document = self._document_builder.build(path)
            except ParseError as exc:
                if on_error is None:
                    raise
                on_error(path, slugify(path.stem.lstrip("_")), exc)
                continue
            if document.draft and not include_drafts:
                logger.debug("Skipping draft %s", document.slug)
                continue
            if document.slug in seen:
                error = ParseError(
                    f"duplicate identifier '{document.slug}' "
                    f"(already used by {seen[document.slug]})",
                    path,
                )
                if on_error is None:
                    raise error
                on_error(path, document.slug, error)
                continue
            seen[document.slug] = path
            documents.append(document)
        return documents
