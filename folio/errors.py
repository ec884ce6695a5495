"""Exception types raised by the Folio pipeline.

Each stage raises its own error kind so the build loop can tell which stage
rejected a document:
- ParseError: front-matter is malformed or a required field is missing.
- RenderError: body markup is malformed (e.g. an unclosed code fence).
- ConfigError: folio.yaml is malformed or holds an invalid value.
"""

from __future__ import annotations

from pathlib import Path


class FolioError(Exception):
    """Base class for Folio errors tied to a source file.

    Attributes:
        source_path: Path to the file that caused the error, if known.
        message: Human-readable error message.
    """

    def __init__(self, message: str, source_path: Path | None = None):
        self.source_path = source_path
        self.message = message
        if source_path is not None:
            super().__init__(f"{source_path}: {message}")
        else:
            super().__init__(message)


class ParseError(FolioError):
    """Raised when a source document cannot be loaded."""


class RenderError(FolioError):
    """Raised when a document body cannot be rendered.

    Attributes:
        line: 1-based body line where the problem starts, if known.
    """

    def __init__(
        self,
        message: str,
        source_path: Path | None = None,
        line: int | None = None,
    ):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, source_path)


class ConfigError(FolioError):
    """Raised when the site configuration is invalid."""
