"""Folio static blog pipeline.

This package loads Markdown posts with YAML front-matter, renders them to HTML
while keeping fenced code samples byte-for-byte intact, and publishes a site made
of an index page plus one page per post.

The pipeline runs in three stages:
- Content store: reads source files into Document objects.
- Renderer: turns a Document into a RenderedDocument.
- Publisher: assembles rendered documents into a Site and writes it to disk.

The main entry point is the CLI module, which exposes the ``build`` command.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
