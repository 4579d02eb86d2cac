"""Tabular (CSV) import and export."""

import csv
import io
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from dateutil import parser as date_parser

from tasktracker.models.task import Task, TaskPriority
from tasktracker.models.task_factory import create_task_base
from tasktracker.models.constants import TAG_SEPARATOR
from tasktracker.formats.errors import ImportFormatError, NO_VALID_TASKS

logger = logging.getLogger(__name__)

# Field -> header substrings, checked in this order. A column is claimed by the
# first field that matches it.
HEADER_KEYWORDS = (
    ("title", ("title", "task", "name")),
    ("completed", ("complete", "done", "status")),
    ("priority", ("priority",)),
    ("category", ("category",)),
    ("tags", ("tag",)),
    ("due_date", ("due", "deadline")),
)

COMPLETED_TOKENS = {"true", "1", "yes", "completed"}

EXPORT_HEADER = ["title", "completed", "priority", "category", "tags", "dueDate"]

QUOTE_CHARS = "\"'"


def match_columns(header: Sequence[str]) -> Dict[str, int]:
    """Map fields to column indexes by fuzzy header matching.

    Args:
        header: Header row cells

    Returns:
        Dictionary of field name -> column index for every matched field
    """
    normalized = [cell.strip().strip(QUOTE_CHARS).lower() for cell in header]
    columns: Dict[str, int] = {}
    claimed = set()
    for field, keywords in HEADER_KEYWORDS:
        for index, cell in enumerate(normalized):
            if index in claimed:
                continue
            if any(keyword in cell for keyword in keywords):
                columns[field] = index
                claimed.add(index)
                break
    return columns


def _cell(row: Sequence[str], columns: Dict[str, int], field: str) -> str:
    index = columns.get(field)
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


def _strip_quotes(value: str) -> str:
    return value.strip().strip(QUOTE_CHARS).strip()


def parse_completed(value: str) -> bool:
    return value.strip().lower() in COMPLETED_TOKENS


def parse_priority(value: str) -> TaskPriority:
    try:
        return TaskPriority(value.strip().lower())
    except ValueError:
        return TaskPriority.MEDIUM


def parse_tags(value: str) -> List[str]:
    return [tag.strip() for tag in value.split(TAG_SEPARATOR) if tag.strip()]


def parse_due_date(value: str) -> Optional[datetime]:
    """Parse a due date leniently; unparseable values are dropped."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        pass
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        logger.warning(f"Ignoring unparseable due date {value!r}: {type(e).__name__}")
        return None


def parse_csv_tasks(content: str) -> List[Task]:
    """Parse CSV content with a header row into tasks.

    A title column is mandatory. Rows without a title are skipped.

    Args:
        content: CSV text, first line is the header

    Returns:
        Parsed tasks in row order (order values are reassigned on merge)

    Raises:
        ImportFormatError: If there is no title column or no row yields a task
    """
    reader = csv.reader(io.StringIO(content.lstrip("\ufeff")))
    try:
        rows = [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as e:
        raise ImportFormatError(f"Invalid CSV: {e}") from e
    if not rows:
        raise ImportFormatError(NO_VALID_TASKS)

    columns = match_columns(rows[0])
    if "title" not in columns:
        raise ImportFormatError("CSV must have a title column (header containing 'title' or 'task')")

    tasks: List[Task] = []
    for line_number, row in enumerate(rows[1:], start=2):
        title = _strip_quotes(_cell(row, columns, "title"))
        if not title:
            logger.debug(f"Skipping CSV row {line_number}: no title")
            continue

        category = _strip_quotes(_cell(row, columns, "category"))
        tasks.append(
            create_task_base(
                title=title,
                completed=parse_completed(_cell(row, columns, "completed")),
                priority=parse_priority(_cell(row, columns, "priority")),
                category=category or None,
                tags=parse_tags(_cell(row, columns, "tags")),
                due_date=parse_due_date(_cell(row, columns, "due_date")),
            )
        )

    if not tasks:
        raise ImportFormatError(NO_VALID_TASKS)

    logger.debug(f"Parsed {len(tasks)} tasks from CSV")
    return tasks


def export_csv(tasks: List[Task]) -> str:
    """Export tasks as CSV that parse_csv_tasks reads back."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for task in tasks:
        writer.writerow([
            task.title,
            "true" if task.completed else "false",
            task.priority,
            task.category or "",
            TAG_SEPARATOR.join(task.tags),
            task.due_date.isoformat() if task.due_date else "",
        ])
    return buffer.getvalue()
