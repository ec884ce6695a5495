"""Template rendering engine for Folio.

This module uses Jinja2 to wrap rendered documents in their layouts and to
render the site index. Layouts are looked up in the source's ``_layouts``
directory first and then in the layouts shipped with the package.

Key class:
- TemplateEngine: Handles template rendering and provides context to templates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    Template,
    TemplateNotFound,
    select_autoescape,
)
from markupsafe import Markup

from .collections import DocumentCollection
from .html_utils import escape_html, join_root_url
from .renderers import Heading, pygments_css

__all__ = ["TemplateEngine", "render_toc"]

logger = logging.getLogger(__name__)

LAYOUT_SUFFIXES = (".html.jinja", ".jinja", ".html")


def render_toc(headings: list[Heading]) -> Markup:
    """Render a list of headings as nested HTML.

    Generates properly nested `<ul><li><a href="#id">text</a></li></ul>` structure
    based on heading levels. Heading text is already-rendered inline HTML, so
    its tags are dropped and only the text is kept.

    Args:
        headings: List of Heading objects.

    Returns:
        Markup-safe HTML string of the nested TOC, or empty Markup if no headings.
    """
    if not headings:
        return Markup("")

    html_parts: list[str] = []
    level_stack: list[int] = []

    for heading in headings:
        level = heading.level

        # Close nested lists if going to a shallower level
        while level_stack and level_stack[-1] > level:
            level_stack.pop()
            html_parts.append("</li></ul>")

        if level_stack and level_stack[-1] == level:
            html_parts.append("</li>")
        elif not level_stack or level > level_stack[-1]:  # pragma: no branch
            html_parts.append("<ul>")
            level_stack.append(level)

        text = Markup(heading.text).striptags()
        html_parts.append(f'<li><a href="#{escape_html(heading.id)}">{escape_html(text)}</a>')

    while level_stack:
        level_stack.pop()
        html_parts.append("</li></ul>")

    return Markup("".join(html_parts))


class TemplateEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        source_dir: Directory whose ``_layouts`` folder overrides built-in layouts.
        config: Site configuration, exposed to templates as ``site``.
        env: Jinja2 environment.
        documents: Collection of every published document.
    """

    def __init__(self, source_dir: Path | None, config: dict[str, Any]):
        """Initialize the template engine.

        Args:
            source_dir: Source directory, or None to use built-in layouts only.
            config: Site configuration.
        """
        self.source_dir = source_dir
        self.config = config
        loaders = []
        if source_dir is not None and source_dir.is_dir():
            loaders.append(FileSystemLoader(source_dir / "_layouts"))
        loaders.append(PackageLoader("folio", "layouts"))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            keep_trailing_newline=True,
        )
        self.documents = DocumentCollection([])
        self._install_globals()

    def _install_globals(self) -> None:
        """Install global variables and functions in the Jinja environment."""
        self.env.globals["site"] = self.config
        self.env.globals["documents"] = self.documents
        self.env.globals["url_for"] = self._url_for
        self.env.globals["pygments_css"] = self._pygments_css
        self.env.globals["render_toc"] = render_toc

    def _pygments_css(self) -> str:
        if not self.config.get("highlight"):
            return ""
        return pygments_css()

    def update_documents(self, documents: Iterable[Any]) -> None:
        """Replace the collection of published documents.

        Args:
            documents: Every document that will appear in the site.
        """
        self.documents = DocumentCollection(documents)
        self.env.globals["documents"] = self.documents

    def _url_for(self, path: str) -> str:
        """Generate a URL for a path, prefixed with the configured base path.

        Args:
            path: Path to generate URL for.

        Returns:
            URL with the site's ``baseurl`` prefix, if any.
        """
        if path.startswith(("http://", "https://", "//")):
            return path
        base = str(self.config.get("baseurl") or "")
        if base:
            return join_root_url(base, path)
        return path if path.startswith("/") else f"/{path}"

    def render_document(self, published: Any) -> str:
        """Render a published document inside its layout.

        Args:
            published: PublishedDocument to render.

        Returns:
            Rendered HTML string.
        """
        context = {
            "page": published,
            "document": published.document,
            "frontmatter": published.document.frontmatter,
            "content": Markup(published.html),
            "toc": render_toc(published.toc),
        }
        template = self.resolve_layout(published.layout)
        return template.render(**context)

    def render_index(self, entries: Iterable[Any]) -> str:
        """Render the site index.

        Args:
            entries: Index entries in publication order.

        Returns:
            Rendered HTML string.
        """
        return self.resolve_layout("index").render(entries=list(entries))

    def resolve_layout(self, layout: str) -> Template:
        """Resolve and return the layout template.

        Tries ``{layout}`` with each known suffix, then ``default``. When no
        layout can be found at all the content is rendered bare.

        Args:
            layout: Layout name to resolve.

        Returns:
            Jinja2 Template object.
        """
        candidates = [f"{layout}{suffix}" for suffix in LAYOUT_SUFFIXES]
        if layout != "default":
            candidates.extend(f"default{suffix}" for suffix in LAYOUT_SUFFIXES)
        for name in candidates:
            try:
                return self.env.get_template(name)
            except TemplateNotFound:
                continue
        logger.warning("No layout found for '%s'; rendering content only", layout)
        return self.env.from_string("{{ content }}")

