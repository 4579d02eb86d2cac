"""Structured-record (JSON) import."""

import json
import logging
from typing import Any, List

from pydantic import ValidationError

from tasktracker.models.task import Task
from tasktracker.formats.errors import ImportFormatError, NO_VALID_TASKS

logger = logging.getLogger(__name__)


def _has_required_fields(record: Any) -> bool:
    """Check the mandatory id/title/completed/createdAt fields and their types."""
    if not isinstance(record, dict):
        return False
    created_at = record.get("createdAt", record.get("created_at"))
    return (
        isinstance(record.get("id"), str)
        and isinstance(record.get("title"), str)
        and isinstance(record.get("completed"), bool)
        and created_at is not None
    )


def parse_json_tasks(content: str) -> List[Task]:
    """Parse a JSON array of task records, or a single record.

    Every record must carry a string id, a string title, a boolean completed
    flag and a createdAt value; one bad record fails the whole import.
    Priority, tags and order are defaulted when missing.

    Args:
        content: JSON text

    Returns:
        Parsed tasks in document order (order values are reassigned on merge)

    Raises:
        ImportFormatError: If the content is not valid JSON, a record is
            malformed, or there are no records at all
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    records = data if isinstance(data, list) else [data]

    tasks: List[Task] = []
    for index, record in enumerate(records):
        if not _has_required_fields(record):
            raise ImportFormatError(
                f"Invalid task format at record {index + 1}: "
                "each task needs a string id, a string title, a boolean completed and a createdAt value"
            )
        try:
            tasks.append(Task.model_validate(record))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ()))
            raise ImportFormatError(
                f"Invalid task format at record {index + 1}: {field}: {first.get('msg')}"
            ) from e

    if not tasks:
        raise ImportFormatError(NO_VALID_TASKS)

    logger.debug(f"Parsed {len(tasks)} tasks from JSON")
    return tasks
