"""CSV codec.

One header row and one row per task. Every field is quoted and embedded
quotes are doubled (RFC 4180). Labels are joined with ``;``.

Lossy: ids and timestamps are not exported. ``Parent ID`` carries the id the
parent had in the exporting store.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from tasktree.codecs.common import apply_export_options
from tasktree.exceptions import DecodeError
from tasktree.models import DecodedBatch, ExportOptions, Task

HEADERS = ["Title", "Description", "Status", "Deadline", "Parent ID", "Labels", "Priority"]

# Lower-cased header -> record field
_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "deadline": "deadline",
    "parent id": "parent_id",
    "labels": "labels",
    "priority": "priority",
}


def _row(task: Task) -> list[str]:
    return [
        task.title,
        task.description or "",
        task.status.value,
        task.deadline.isoformat() if task.deadline else "",
        "" if task.parent_id is None else str(task.parent_id),
        ";".join(task.labels),
        str(task.priority),
    ]


def encode(tasks: Iterable[Task], options: ExportOptions | None = None) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(HEADERS)
    for task in apply_export_options(tasks, options):
        writer.writerow(_row(task))
    return buffer.getvalue()


def _parse_int(value: str, column: str) -> int | None:
    value = value.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{column} '{value}' is not an integer") from None


def _parse_deadline(value: str) -> datetime | None:
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Deadline '{value}' is not an ISO-8601 date") from None


def _to_record(columns: dict[str, int], row: list[str]) -> dict[str, Any]:
    raw = {field: row[index] for field, index in columns.items()}
    record: dict[str, Any] = {
        "title": raw.get("title", ""),
        "description": raw.get("description"),
        "status": raw.get("status", "").strip() or "not_started",
        "labels": raw.get("labels", ""),
    }
    if "deadline" in raw:
        record["deadline"] = _parse_deadline(raw["deadline"])
    if "parent_id" in raw:
        record["parent_id"] = _parse_int(raw["parent_id"], "Parent ID")
    if "priority" in raw:
        record["priority"] = _parse_int(raw["priority"], "Priority")
    return record


def decode(text: str) -> DecodedBatch:
    """Parse CSV text into raw records.

    Columns are matched by header name, case-insensitively and in any order;
    unknown columns are ignored. Rows that cannot be parsed are reported in
    ``errors`` and skipped.

    Raises:
        DecodeError: If there is no header row or it lacks a Title column
    """
    reader = csv.reader(io.StringIO(text))
    batch = DecodedBatch()

    header: list[str] | None = None
    try:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            if header is None:
                header = [cell.strip().lower() for cell in row]
                break
    except csv.Error as e:
        raise DecodeError(f"Invalid CSV header: {e}") from e

    if header is None:
        raise DecodeError("CSV input is empty")
    columns = {_FIELDS[name]: index for index, name in enumerate(header) if name in _FIELDS}
    if "title" not in columns:
        raise DecodeError("CSV header has no Title column")

    while True:
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            batch.errors.append(f"Line {reader.line_num}: {e}")
            continue

        if not any(cell.strip() for cell in row):
            continue
        if len(row) != len(header):
            batch.errors.append(
                f"Line {reader.line_num}: expected {len(header)} fields, got {len(row)}"
            )
            continue
        try:
            batch.records.append(_to_record(columns, row))
        except ValueError as e:
            batch.errors.append(f"Line {reader.line_num}: {e}")

    return batch
