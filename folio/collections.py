from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import Any


def sort_documents(items: Iterable[Any]) -> list[Any]:
    """Order documents newest first, breaking date ties by identifier.

    Works on anything with ``date`` and ``slug`` attributes (Documents,
    RenderedDocuments, index entries). The result is a total order, so the
    same input always yields the same sequence.
    """
    by_slug = sorted(items, key=lambda item: item.slug)
    return sorted(by_slug, key=lambda item: item.date, reverse=True)


class DocumentCollection(Sequence[Any]):
    """Lightweight helper for working with ordered documents in templates and code."""

    def __init__(self, items: Iterable[Any]):
        self._items = sort_documents(items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, item):
        return self._items[item]

    def with_tag(self, tag: str) -> DocumentCollection:
        return DocumentCollection(p for p in self._items if tag in p.tags)

    def with_layout(self, layout: str) -> DocumentCollection:
        return DocumentCollection(p for p in self._items if p.layout == layout)

    def latest(self, count: int = 5) -> DocumentCollection:
        return DocumentCollection(self._items[:count])

    def oldest_first(self) -> list[Any]:
        return list(reversed(self._items))

    def tags(self) -> dict[str, DocumentCollection]:
        """Map every tag to the documents carrying it, tags sorted by name."""
        index: dict[str, list[Any]] = {}
        for item in self._items:
            for tag in item.tags:
                index.setdefault(tag, []).append(item)
        return {tag: DocumentCollection(index[tag]) for tag in sorted(index)}

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"DocumentCollection({len(self._items)} documents)"
