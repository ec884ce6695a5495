"""Site building functionality for Folio.

This module runs the whole pipeline: it loads configuration, loads documents
from the source, renders them, publishes the site and writes it to the output
directory. A document that fails to load or render is logged, recorded as a
BuildFailure and left out; every other document is still published.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from folio.yaml.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .content import ContentStore
from .errors import ConfigError, FolioError, RenderError
from .publisher import Publisher, Site, write_site
from .renderers import MarkdownRenderer, RenderedDocument

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "folio.yaml"

DEFAULT_CONFIG = {
    "title": "Folio",
    "url": "",
    "baseurl": "",
    "permalink": "/:year/:month/:day/:slug/",
    "default_layout": "post",
    "highlight": False,
    "language": "en",
    "date_format": "%B %d, %Y",
}


@dataclass
class BuildFailure:
    """A document left out of the site.

    Attributes:
        source_path: Path to the source file.
        identifier: Document identifier (slug).
        message: Reason the document was skipped.
        error: The error that caused the failure.
    """

    source_path: Path
    identifier: str
    message: str
    error: FolioError


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        site: The published site.
        output_dir: Directory where the site was written.
        config: Configuration the build used.
        failures: Documents that were skipped, in the order they failed.
    """

    site: Site
    output_dir: Path
    config: dict[str, Any]
    failures: list[BuildFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def load_config(source: Path) -> dict[str, Any]:
    """Load site configuration from folio.yaml.

    Args:
        source: Source directory (or a file inside the source directory).

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    root = source if source.is_dir() else source.parent
    config_path = root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if not config_path.exists():
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"invalid YAML: {exc}", config_path) from exc
    if loaded is None:
        return config
    if not isinstance(loaded, dict):
        raise ConfigError("configuration must be a mapping of keys to values", config_path)
    config.update(loaded)
    return config


def build_site(
    source: Path,
    output_dir: Path,
    include_drafts: bool = False,
    config_overrides: dict[str, Any] | None = None,
    clean_output: bool = True,
) -> BuildResult:
    """Build the site from ``source`` into ``output_dir``.

    Args:
        source: Source directory (or a single source file).
        output_dir: Directory to write the site into.
        include_drafts: Whether to publish draft documents.
        config_overrides: Values that take precedence over folio.yaml.
        clean_output: Whether to wipe the output directory before writing.

    Returns:
        BuildResult with the site and any per-document failures.

    Raises:
        ConfigError: If the configuration is invalid or the output directory
            would overwrite the source.
        FileNotFoundError: If the source does not exist.
    """
    if not source.exists():
        raise FileNotFoundError(f"Expected source at {source}")
    config = load_config(source)
    if config_overrides:
        config.update(config_overrides)
    source_dir = source if source.is_dir() else source.parent
    _check_output_dir(source_dir, output_dir)
    publisher = Publisher(config, source_dir=source_dir)

    failures: list[BuildFailure] = []

    def record(path: Path, identifier: str, error: FolioError) -> None:
        logger.warning("Skipping %s: %s", identifier, error.message)
        failures.append(BuildFailure(path, identifier, error.message, error))

    store = ContentStore(default_layout=str(config["default_layout"]))
    documents = store.load(source, include_drafts=include_drafts, on_error=record)
    logger.info("Loaded %d documents from %s", len(documents), source)

    renderer = MarkdownRenderer(use_pygments=bool(config.get("highlight")))
    rendered: list[RenderedDocument] = []
    for document in documents:
        try:
            rendered.append(renderer.render(document))
        except RenderError as exc:
            record(document.path, document.slug, exc)

    site = publisher.publish(
        rendered,
        on_error=lambda item, exc: record(item.document.path, item.slug, exc),
    )
    write_site(site, output_dir, clean_output=clean_output)
    logger.info(
        "Published %d documents, skipped %d", len(site.documents), len(failures)
    )
    return BuildResult(site=site, output_dir=output_dir, config=config, failures=failures)


def _check_output_dir(source_dir: Path, output_dir: Path) -> None:
    """Refuse an output directory that holds the source.

    The output directory is emptied before writing, so it may not be the
    source directory or one of its parents.
    """
    source_dir = source_dir.resolve()
    target = output_dir.resolve()
    if target == source_dir or target in source_dir.parents:
        raise ConfigError(
            f"output directory {output_dir} contains the source directory {source_dir}"
        )
