"""Serialization codecs for task import/export.

Every codec module exposes ``encode(tasks, options) -> str`` and
``decode(text) -> DecodedBatch``.
"""

from __future__ import annotations

from pathlib import Path
from types import ModuleType

from tasktree.exceptions import ValidationError
from tasktree.models import ExportFormat

from . import csv_codec, json_codec, markdown_codec

_CODECS: dict[ExportFormat, ModuleType] = {
    ExportFormat.JSON: json_codec,
    ExportFormat.CSV: csv_codec,
    ExportFormat.MARKDOWN: markdown_codec,
}

FILE_EXTENSIONS: dict[ExportFormat, str] = {
    ExportFormat.JSON: ".json",
    ExportFormat.CSV: ".csv",
    ExportFormat.MARKDOWN: ".md",
}

_EXTENSION_FORMATS = {
    ".json": ExportFormat.JSON,
    ".csv": ExportFormat.CSV,
    ".md": ExportFormat.MARKDOWN,
    ".markdown": ExportFormat.MARKDOWN,
}


def get_codec(fmt: ExportFormat | str) -> ModuleType:
    """Return the codec module for a format name."""
    try:
        return _CODECS[ExportFormat(fmt)]
    except ValueError as e:
        choices = ", ".join(f.value for f in ExportFormat)
        raise ValidationError(f"Unsupported format '{fmt}'. Choose from: {choices}") from e


def format_from_filename(filename: str | Path) -> ExportFormat:
    """Guess the format from a file extension."""
    suffix = Path(filename).suffix.lower()
    try:
        return _EXTENSION_FORMATS[suffix]
    except KeyError:
        raise ValidationError(
            f"Cannot tell the format of '{filename}'; use .json, .csv or .md, or pass --format"
        ) from None


__all__ = [
    "FILE_EXTENSIONS",
    "csv_codec",
    "format_from_filename",
    "get_codec",
    "json_codec",
    "markdown_codec",
]
