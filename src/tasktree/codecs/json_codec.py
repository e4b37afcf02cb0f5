"""JSON codec: a pretty-printed list of complete task objects.

Lossless: with default export options ``decode_tasks(encode(tasks))`` gives
back equal tasks, ids and timestamps included.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import pydantic

from tasktree.codecs.common import apply_export_options
from tasktree.exceptions import DecodeError
from tasktree.models import DecodedBatch, ExportOptions, Task


def encode(tasks: Iterable[Task], options: ExportOptions | None = None) -> str:
    payload = [task.model_dump(mode="json") for task in apply_export_options(tasks, options)]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def _load_items(text: str) -> list[Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e

    if isinstance(data, dict) and isinstance(data.get("tasks"), list):
        data = data["tasks"]
    if not isinstance(data, list):
        raise DecodeError(
            f"Expected a JSON array of tasks, got {type(data).__name__}"
        )
    return data


def decode(text: str) -> DecodedBatch:
    """Parse exported JSON into raw records.

    Raises:
        DecodeError: If the text is not JSON or not a list of tasks
    """
    batch = DecodedBatch()
    for index, item in enumerate(_load_items(text), start=1):
        if isinstance(item, dict):
            batch.records.append(item)
        else:
            batch.errors.append(f"Record {index}: expected an object, got {type(item).__name__}")
    return batch


def decode_tasks(text: str) -> list[Task]:
    """Parse exported JSON back into complete Task objects.

    Raises:
        DecodeError: If any entry is not a valid task
    """
    tasks = []
    for index, item in enumerate(_load_items(text), start=1):
        try:
            tasks.append(Task.model_validate(item))
        except pydantic.ValidationError as e:
            raise DecodeError(f"Record {index} is not a valid task: {e}") from e
    return tasks
