"""Site publishing for Folio.

This module assembles rendered documents into a Site: it assigns each
document a permalink, orders documents newest first, renders every page
through its layout and the index through the index layout, and adds feeds.
``write_site`` then writes the Site's output units to disk.

Key classes:
- PublishedDocument: A rendered document plus its permalink.
- IndexEntry: One line of the site index.
- OutputUnit: One file of the generated site.
- Site: The complete, ordered result of publishing.
- Publisher: Builds a Site from rendered documents.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any

from .collections import sort_documents
from .content import Document
from .errors import ConfigError, ParseError
from .feeds import FeedRegistry, create_default_feed_registry
from .renderers import Heading, RenderedDocument
from .templates import TemplateEngine
from .utils import ensure_clean_dir

logger = logging.getLogger(__name__)

DEFAULT_PERMALINK = "/:year/:month/:day/:slug/"
PERMALINK_PLACEHOLDERS = (":year", ":month", ":day", ":slug", ":title", ":layout")
INDEX_PERMALINK = "/"


@dataclass
class PublishedDocument:
    """A rendered document with its assigned permalink."""

    rendered: RenderedDocument
    permalink: str

    @property
    def document(self) -> Document:
        return self.rendered.document

    @property
    def html(self) -> str:
        return self.rendered.html

    @property
    def toc(self) -> list[Heading]:
        return self.rendered.toc

    @property
    def slug(self) -> str:
        return self.rendered.document.slug

    @property
    def title(self) -> str:
        return self.rendered.document.title

    @property
    def date(self) -> datetime:
        return self.rendered.document.date

    @property
    def layout(self) -> str:
        return self.rendered.document.layout

    @property
    def tags(self) -> list[str]:
        return self.rendered.document.tags

    @property
    def description(self) -> str:
        return self.rendered.document.description


@dataclass
class IndexEntry:
    """One entry of the site index.

    Attributes:
        permalink: Site-relative address of the document.
        title: Document title.
        date: Publication date.
        slug: Document identifier.
    """

    permalink: str
    title: str
    date: datetime
    slug: str


@dataclass
class OutputUnit:
    """One generated file.

    Attributes:
        path: Output path relative to the site root, POSIX style.
        content: Text content of the file.
    """

    path: str
    content: str


@dataclass
class Site:
    """The result of publishing.

    Attributes:
        documents: Published documents in index order.
        index: Index entries, one per document, in the same order.
        units: Every file to write, index page first.
    """

    documents: list[PublishedDocument] = field(default_factory=list)
    index: list[IndexEntry] = field(default_factory=list)
    units: list[OutputUnit] = field(default_factory=list)

    def permalink_for(self, identifier: str) -> str | None:
        for published in self.documents:
            if published.slug == identifier:
                return published.permalink
        return None


def validate_permalink_pattern(pattern: str) -> str:
    """Check a permalink pattern and normalize its slashes.

    Args:
        pattern: Pattern such as ``/:year/:month/:day/:slug/``.

    Returns:
        The pattern with a leading slash.

    Raises:
        ConfigError: If the pattern cannot produce unique permalinks.
    """
    text = str(pattern).strip()
    if ":slug" not in text and ":title" not in text:
        raise ConfigError(f"permalink pattern {text!r} must contain ':slug'")
    if not text.startswith("/"):
        text = f"/{text}"
    return text


def expand_permalink(pattern: str, document: Document) -> str:
    """Fill a permalink pattern in with a document's values.

    Examples:
        >>> expand_permalink("/:year/:month/:day/:slug/", doc)  # doc dated 2015-11-14
        '/2015/11/14/nothing/'
    """
    values = {
        ":year": f"{document.date.year:04d}",
        ":month": f"{document.date.month:02d}",
        ":day": f"{document.date.day:02d}",
        ":slug": document.slug,
        ":title": document.slug,
        ":layout": document.layout,
    }
    result = pattern
    for placeholder in PERMALINK_PLACEHOLDERS:
        result = result.replace(placeholder, values[placeholder])
    return result


def output_path_for(permalink: str) -> str:
    """Map a permalink to the file that serves it.

    ``/2015/11/14/nothing/`` is served by ``2015/11/14/nothing/index.html``;
    a permalink naming a file (``/about.html``) is served by that file.
    """
    relative = permalink.strip("/")
    if not relative:
        return "index.html"
    if permalink.endswith("/") or not PurePosixPath(relative).suffix:
        return f"{relative}/index.html"
    return relative


PublishErrorHandler = Callable[[RenderedDocument, ParseError], None]


class Publisher:
    """Assembles rendered documents into a Site.

    Attributes:
        config: Site configuration.
        permalink_pattern: Validated permalink pattern.
        template_engine: Engine used for layouts and the index.
        feed_registry: Feed generators run after the pages.
    """

    def __init__(
        self,
        config: dict[str, Any],
        source_dir: Path | None = None,
        template_engine: TemplateEngine | None = None,
        feed_registry: FeedRegistry | None = None,
    ):
        self.config = config
        self.permalink_pattern = validate_permalink_pattern(
            config.get("permalink") or DEFAULT_PERMALINK
        )
        self.template_engine = template_engine or TemplateEngine(source_dir, config)
        self.feed_registry = feed_registry or create_default_feed_registry()

    def permalink_for(self, document: Document) -> str:
        if document.permalink:
            return document.permalink
        return expand_permalink(self.permalink_pattern, document)

    def publish(
        self,
        rendered: Iterable[RenderedDocument],
        on_error: PublishErrorHandler | None = None,
    ) -> Site:
        """Build a Site from rendered documents.

        Args:
            rendered: Rendered documents in any order.
            on_error: Called as ``on_error(rendered, error)`` for a document
                whose permalink collides with an earlier one; that document
                is then left out. When omitted, the collision is raised.

        Returns:
            Site with documents and index ordered newest first.

        Raises:
            ParseError: On a permalink collision when no ``on_error`` is given.
        """
        published: list[PublishedDocument] = []
        taken: dict[str, str] = {output_path_for(INDEX_PERMALINK): "the site index"}
        for item in sort_documents(rendered):
            permalink = self.permalink_for(item.document)
            output_path = output_path_for(permalink)
            if output_path in taken:
                error = ParseError(
                    f"permalink {permalink} is already used by {taken[output_path]}",
                    item.document.path,
                )
                if on_error is None:
                    raise error
                on_error(item, error)
                continue
            taken[output_path] = f"'{item.slug}'"
            published.append(PublishedDocument(rendered=item, permalink=permalink))

        self.template_engine.update_documents(published)
        index = [
            IndexEntry(permalink=p.permalink, title=p.title, date=p.date, slug=p.slug)
            for p in published
        ]
        units = [OutputUnit("index.html", self.template_engine.render_index(index))]
        for item in published:
            units.append(
                OutputUnit(
                    output_path_for(item.permalink),
                    self.template_engine.render_document(item),
                )
            )
        for filename, content in self.feed_registry.generate_all(published, self.config).items():
            units.append(OutputUnit(filename, content))
        return Site(documents=published, index=index, units=units)


def write_site(site: Site, output_dir: Path, clean_output: bool = True) -> list[Path]:
    """Write every output unit of a site under ``output_dir``.

    Args:
        site: Site to write.
        output_dir: Destination directory.
        clean_output: Whether to empty the directory first.

    Returns:
        Paths of the written files, in unit order.
    """
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for unit in site.units:
        target = output_dir / unit.path
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(unit.content)
        written.append(target)
    logger.info("Wrote %d files to %s", len(written), output_dir)
    return written
