"""Import parsers and exporters for the task tracker."""

from enum import Enum
from typing import List

from tasktracker.models.task import Task
from tasktracker.database.persistence import serialize_tasks
from tasktracker.models.constants import JSON_EXPORT_INDENT
from tasktracker.formats.errors import ImportFormatError, NO_VALID_TASKS
from tasktracker.formats.json_format import parse_json_tasks
from tasktracker.formats.csv_format import parse_csv_tasks, export_csv
from tasktracker.formats.text_format import parse_text_tasks, export_text


class TaskFormat(str, Enum):
    """Import/export formats."""
    JSON = "json"
    CSV = "csv"
    TEXT = "text"


def parse_tasks(content: str, fmt: TaskFormat) -> List[Task]:
    """Parse content in the given format.

    Raises:
        ImportFormatError: If the content cannot be parsed into at least one task
    """
    fmt = TaskFormat(fmt)
    if fmt == TaskFormat.JSON:
        return parse_json_tasks(content)
    if fmt == TaskFormat.CSV:
        return parse_csv_tasks(content)
    return parse_text_tasks(content)


def export_tasks(tasks: List[Task], fmt: TaskFormat = TaskFormat.JSON) -> str:
    """Render tasks in the given format."""
    fmt = TaskFormat(fmt)
    if fmt == TaskFormat.CSV:
        return export_csv(tasks)
    if fmt == TaskFormat.TEXT:
        return export_text(tasks)
    return serialize_tasks(tasks, indent=JSON_EXPORT_INDENT)


__all__ = [
    "TaskFormat",
    "ImportFormatError",
    "NO_VALID_TASKS",
    "parse_tasks",
    "export_tasks",
    "parse_json_tasks",
    "parse_csv_tasks",
    "parse_text_tasks",
    "export_csv",
    "export_text",
]
