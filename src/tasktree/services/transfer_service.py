"""Transfer service - export to and import from JSON, CSV and Markdown."""

from __future__ import annotations

from typing import Any

import pydantic

from tasktree.codecs import get_codec
from tasktree.exceptions import DecodeError, TaskTreeError
from tasktree.models import ExportFormat, ExportOptions, ImportRecord, ImportResult
from tasktree.services.task_service import TaskService, describe_validation_error
from tasktree.utils.logger import get_logger

logger = get_logger(__name__)


def _label(index: int, raw: dict[str, Any]) -> str:
    title = raw.get("title")
    return f"Record {index} ({title!r})" if isinstance(title, str) and title else f"Record {index}"


def order_parents_first(records: list[ImportRecord]) -> tuple[list[ImportRecord], list[ImportRecord]]:
    """Order records so an in-batch parent always comes before its children.

    Input order is kept wherever it already satisfies that. Records whose
    parent chain inside the batch loops back on itself cannot be ordered and
    are returned separately.

    Returns:
        (ordered records, records stuck on a cycle)
    """
    batch_ids = {record.id for record in records if record.id is not None}
    placed: set[int] = set()
    ordered: list[ImportRecord] = []
    pending = list(records)

    while pending:
        deferred = []
        for record in pending:
            parent = record.parent_id
            if parent is None or parent not in batch_ids or parent in placed:
                ordered.append(record)
                if record.id is not None:
                    placed.add(record.id)
            else:
                deferred.append(record)
        if len(deferred) == len(pending):
            return ordered, deferred
        pending = deferred

    return ordered, []


class TransferService:
    """Runs codecs over the task store.

    Export reads the whole flat collection; import replays decoded records
    through :meth:`TaskService.create`, so every imported task passes the
    same checks as one created by hand.
    """

    def __init__(self, task_service: TaskService):
        self.tasks = task_service

    async def export_as(
        self, fmt: ExportFormat | str, options: ExportOptions | None = None
    ) -> str:
        """Encode every task in ``fmt``.

        Args:
            fmt: json, csv or markdown
            options: Which tasks and fields to include

        Returns:
            Encoded text
        """
        codec = get_codec(fmt)
        tasks = await self.tasks.list_all()
        text = codec.encode(tasks, options)
        logger.info("exported %d tasks as %s", len(tasks), ExportFormat(fmt).value)
        return text

    async def import_from(self, fmt: ExportFormat | str, text: str) -> ImportResult:
        """Decode ``text`` and create a task per valid record.

        A record's ``parent_id`` naming another record of the same batch is
        rewired to the id that record received; any other parent id must
        already exist in the store. Failures are collected per record and
        never abort the batch.

        Returns:
            ImportResult with the count of created tasks and the errors.
            ``success`` is False only if the text could not be decoded at all.
        """
        codec = get_codec(fmt)
        try:
            batch = codec.decode(text)
        except DecodeError as e:
            logger.warning("import aborted, undecodable %s: %s", ExportFormat(fmt).value, e)
            return ImportResult(success=False, errors=[f"Import failed: {e}"])

        errors = list(batch.errors)
        records: list[ImportRecord] = []
        labels: dict[int, str] = {}
        # Ids of every record in the text, valid or not
        batch_ids: set[int] = set()
        for index, raw in enumerate(batch.records, start=1):
            if isinstance(raw.get("id"), int):
                batch_ids.add(raw["id"])
            try:
                record = ImportRecord.model_validate(raw)
            except pydantic.ValidationError as e:
                errors.append(f"{_label(index, raw)}: {describe_validation_error(e)}")
                continue
            labels[id(record)] = _label(index, raw)
            records.append(record)

        ordered, stuck = order_parents_first(records)
        for record in stuck:
            errors.append(f"{labels[id(record)]}: parent chain forms a cycle, skipped")

        assigned: dict[int, int] = {}
        imported = 0

        for record in ordered:
            label = labels[id(record)]
            if record.id is not None and record.id in assigned:
                errors.append(f"{label}: duplicate id {record.id}, skipped")
                continue

            parent_id = record.parent_id
            if parent_id is not None and parent_id in batch_ids:
                if parent_id not in assigned:
                    errors.append(f"{label}: parent record {parent_id} was not imported, skipped")
                    continue
                parent_id = assigned[parent_id]

            try:
                task = await self.tasks.create(record.to_create(parent_id))
            except TaskTreeError as e:
                errors.append(f"{label}: {e}")
                continue

            if record.id is not None:
                assigned[record.id] = task.id
            imported += 1

        for message in errors:
            logger.warning("import: %s", message)
        logger.info(
            "imported %d of %d records (%s)", imported, len(batch.records), ExportFormat(fmt).value
        )
        return ImportResult(imported_count=imported, errors=errors)
