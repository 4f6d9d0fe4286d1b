"""Load plain-text and Markdown study documents into DocumentContent records.

Only ``.txt`` and ``.md`` are read here.  Markdown is reduced to plain text:

  # Heading            -> "Heading" (the first level-1 heading is the title)
  **bold**, *italic*   -> "bold", "italic"
  [label](url)         -> "label"
  ```code fences```    -> dropped
  - item / 1. item     -> "item"
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from study_quiz.models import DocumentContent, DocumentFailure, DocumentMetadata

_log = logging.getLogger("study_quiz.documents")

SUPPORTED_FORMATS = (".txt", ".md")


class DocumentError(Exception):
    """A document could not be loaded.  ``user_message`` is safe to display."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


def validate_document(path: Path, max_mb: int = 50) -> None:
    """Raise DocumentError if *path* is not a readable, non-empty, supported file."""
    if not path.exists():
        raise DocumentError(f"File does not exist: {path}", f"File not found: {path.name}")
    if not path.is_file():
        raise DocumentError(f"Path is not a file: {path}", "Selected path is a folder, not a file")
    fmt = path.suffix.lower()
    if fmt not in SUPPORTED_FORMATS:
        raise DocumentError(
            f"Unsupported format: {fmt or '(none)'}. Supported formats: {', '.join(SUPPORTED_FORMATS)}",
            f"Unsupported file type: {fmt or '(none)'}. Please use MD or TXT files.",
        )
    size = path.stat().st_size
    if size > max_mb * 1024 * 1024:
        size_mb = size / (1024 * 1024)
        raise DocumentError(
            f"File size ({size_mb:.2f}MB) exceeds maximum allowed size ({max_mb}MB)",
            f"File is too large ({size_mb:.2f}MB). Maximum size is {max_mb}MB.",
        )
    if size == 0:
        raise DocumentError("File is empty", "File is empty and cannot be processed")


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        _log.warning("Used latin-1 fallback for %s", path.name)
        return path.read_text(encoding="latin-1")
    except OSError as e:
        raise DocumentError(f"Failed to read {path}: {e}", "Cannot read file. Please check file permissions.") from e


def markdown_to_text(markdown: str) -> tuple[str, list[str]]:
    """Strip Markdown syntax.  Returns (plain_text, headings)."""
    headings: list[str] = []
    lines: list[str] = []
    in_fence = False
    for line in markdown.splitlines():
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        m = re.match(r"^(#{1,6})\s+(.*?)\s*#*\s*$", line)
        if m:
            headings.append(f"{m.group(1)} {m.group(2)}")
            line = m.group(2)
        line = re.sub(r"^\s*(?:[-*+]|\d+[.)])\s+", "", line)   # list markers
        line = re.sub(r"^\s*>\s?", "", line)                   # blockquotes
        line = re.sub(r"!?\[([^\]]*)\]\([^)]*\)", r"\1", line)  # links, images
        line = re.sub(r"\*\*(.+?)\*\*", r"\1", line)            # bold
        line = re.sub(r"(?<!\w)__(.+?)__(?!\w)", r"\1", line)
        line = re.sub(r"\*(.+?)\*", r"\1", line)                # italic
        line = re.sub(r"(?<!\w)_(.+?)_(?!\w)", r"\1", line)
        line = re.sub(r"`([^`]*)`", r"\1", line)                # inline code
        lines.append(line)
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip(), headings


def _title_from_headings(headings: list[str]) -> str | None:
    for h in headings:
        if h.startswith("# "):
            return h[2:].strip()
    return None


def load_document(path: Path | str, max_mb: int = 50) -> DocumentContent:
    path = Path(path)
    validate_document(path, max_mb)
    raw = _read_text(path)
    if not raw.strip():
        raise DocumentError(f"Document is empty: {path}", "This document is empty.")

    fmt = path.suffix.lower()
    headings: list[str] = []
    if fmt == ".md":
        content, headings = markdown_to_text(raw)
        title = _title_from_headings(headings) or path.stem
    else:
        content = raw.strip()
        title = path.stem

    return DocumentContent(
        file_path=str(path),
        content=content,
        metadata=DocumentMetadata(
            title=title,
            word_count=len(content.split()),
            format=fmt,
            headings=headings,
        ),
    )


def load_documents(
    paths: Iterable[Path | str], max_mb: int = 50,
) -> tuple[list[DocumentContent], list[DocumentFailure]]:
    """Load every path, collecting failures instead of stopping at the first."""
    documents: list[DocumentContent] = []
    failures: list[DocumentFailure] = []
    for p in paths:
        try:
            documents.append(load_document(p, max_mb))
        except DocumentError as e:
            _log.warning("Skipping %s: %s", p, e)
            failures.append(DocumentFailure(str(p), e.user_message))
    return documents, failures
