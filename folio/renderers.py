"""Document rendering for Folio.

This module turns a Document into a RenderedDocument. Markdown text is
rendered with mistune, while fenced code blocks bypass the Markdown parser
entirely so their content reaches the HTML exactly as written.

Key classes:
- Heading: A heading collected for the table of contents.
- RenderedDocument: A Document together with its HTML.
- MarkdownRenderer: Renders Markdown text and code blocks to HTML.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .content import CodeBlock, Document, TextSegment
from .html_utils import escape_code, escape_html

MARKDOWN_PLUGINS = ["strikethrough", "footnotes", "table", "url"]


@dataclass
class Heading:
    """Represents a heading extracted from markdown content for TOC generation.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: The text content of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


@dataclass
class RenderedDocument:
    """A document together with its rendered body.

    Attributes:
        document: The source Document.
        html: Rendered HTML body.
        code_blocks: Code blocks in source order, content untouched.
        toc: Headings found in the body.
    """

    document: Document
    html: str
    code_blocks: list[CodeBlock] = field(default_factory=list)
    toc: list[Heading] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.document.slug

    @property
    def slug(self) -> str:
        return self.document.slug

    @property
    def title(self) -> str:
        return self.document.title

    @property
    def date(self) -> datetime:
        return self.document.date

    @property
    def layout(self) -> str:
        return self.document.layout

    @property
    def tags(self) -> list[str]:
        return self.document.tags


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = re.sub(r"<[^>]+>", "", text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-") or "section"


def _rewrite_image_path(src: str) -> str:
    """Rewrite relative image sources to point into the assets directory.

    Args:
        src: Original image source.

    Returns:
        Rewritten image source path.
    """
    if src.startswith(("http://", "https://", "//", "/", "data:")):
        return src
    return f"/assets/images/{src}"


def render_code_block(block: CodeBlock, use_pygments: bool = False) -> str:
    """Render a code block to HTML without altering its content.

    Args:
        block: Code block to render.
        use_pygments: Whether to highlight labelled blocks with Pygments.

    Returns:
        HTML for the block.
    """
    if use_pygments and block.language:
        try:
            lexer = get_lexer_by_name(block.language, stripnl=False, ensurenl=False)
        except ClassNotFound:
            lexer = None
        if lexer is not None:
            formatter = HtmlFormatter(cssclass=f"highlight language-{block.language}")
            return highlight(block.content, lexer, formatter)
    lang_class = f' class="language-{escape_html(block.language)}"' if block.language else ""
    return f"<pre><code{lang_class}>{escape_code(block.content)}</code></pre>\n"


class _HeadingRenderer(mistune.HTMLRenderer):
    """Markdown renderer that gives headings ids and rewrites image paths.

    Code that mistune parses itself (fences nested in list items, indented
    code) is handed back to ``on_code`` so it is rendered like top-level
    code blocks.

    Attributes:
        headings: Headings extracted during rendering.
    """

    def __init__(self, on_code: Callable[[CodeBlock], str]):
        super().__init__(escape=False)
        self.headings: list[Heading] = []
        self._heading_id_counts: dict[str, int] = {}
        self._on_code = on_code

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)

        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id

        self.headings.append(Heading(id=heading_id, text=text, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def image(self, text: str, url: str | None = None, title: str | None = None):
        return super().image(text, _rewrite_image_path(url or ""), title)

    def block_code(self, code: str, info: str | None = None) -> str:
        info = (info or "").strip()
        language = info.split()[0] if info else ""
        return self._on_code(CodeBlock(language=language, content=code, info=info))


class MarkdownRenderer:
    """Renders Documents to HTML.

    Text segments are joined back together with a placeholder comment where
    each code block sat, so Markdown constructs that span a code block
    (lists, reference links) still parse as one document. Each placeholder is
    then swapped for the block's HTML.

    Attributes:
        use_pygments: Whether labelled code blocks are highlighted server-side.
    """

    def __init__(self, use_pygments: bool = False):
        self.use_pygments = use_pygments

    def render(self, document: Document) -> RenderedDocument:
        """Render a document.

        Args:
            document: Document to render.

        Returns:
            RenderedDocument with HTML, code blocks and TOC.

        Raises:
            RenderError: If the body has an unclosed code fence.
        """
        segments = document.segments()
        token = uuid.uuid4().hex
        pieces: list[str] = []
        blocks: list[CodeBlock] = []

        def placeholder(block: CodeBlock) -> str:
            blocks.append(block)
            return f"<!--folio-code-{token}-{len(blocks) - 1}-->\n"

        for segment in segments:
            if isinstance(segment, TextSegment):
                pieces.append(segment.text)
            else:
                pieces.append(f"\n{segment.indent}{placeholder(segment)}")

        renderer = _HeadingRenderer(on_code=placeholder)
        markdown = mistune.create_markdown(renderer=renderer, plugins=MARKDOWN_PLUGINS)
        html = markdown("".join(pieces))

        placeholder_re = re.compile(rf"<!--folio-code-{token}-(\d+)-->\n?")
        code_blocks = [blocks[int(m.group(1))] for m in placeholder_re.finditer(html)]

        def repl(match: re.Match) -> str:
            return render_code_block(blocks[int(match.group(1))], self.use_pygments)

        html = placeholder_re.sub(repl, html)
        return RenderedDocument(
            document=document,
            html=html,
            code_blocks=code_blocks,
            toc=renderer.headings,
        )


def render(document: Document, use_pygments: bool = False) -> RenderedDocument:
    """Render a single document with a default MarkdownRenderer."""
    return MarkdownRenderer(use_pygments=use_pygments).render(document)


def pygments_css(style: str = "default") -> str:
    """Return Pygments CSS rules for the ``.highlight`` class."""
    return HtmlFormatter(style=style).get_style_defs(".highlight")

