"""Line-oriented (plain text) import and export.

One task per non-blank line::

    - [x] Finish report !!
    [ ] Call the bank !
    • Water plants
"""

import logging
import re
from typing import List, Optional, Tuple

from tasktracker.models.task import Task, TaskPriority
from tasktracker.models.task_factory import create_task_base
from tasktracker.formats.errors import ImportFormatError, NO_VALID_TASKS

logger = logging.getLogger(__name__)

# Checked in order; the longer marker must win over its prefix
COMPLETED_MARKERS = ("- [x]", "[x]", "✓")
INCOMPLETE_MARKERS = ("- [ ]", "[ ]", "• ", "-")

EXCLAMATION_RUN = re.compile(r"!+")

MARKS_TO_PRIORITY = {1: TaskPriority.LOW, 2: TaskPriority.MEDIUM}


def strip_marker(line: str) -> Tuple[str, bool]:
    """Strip a leading completion marker.

    Returns:
        Tuple of (remaining text, completed flag)
    """
    lowered = line.lower()
    for marker in COMPLETED_MARKERS:
        if lowered.startswith(marker):
            return line[len(marker):].strip(), True
    for marker in INCOMPLETE_MARKERS:
        if line.startswith(marker):
            return line[len(marker):].strip(), False
    return line, False


def _run_weight(text: str, match: re.Match) -> int:
    """Number of priority marks in one run of exclamation marks.

    A run glued to the end of a word spends its first mark as ordinary
    punctuation; a free-standing run counts every mark.
    """
    length = match.end() - match.start()
    attached = match.start() > 0 and not text[match.start() - 1].isspace()
    return length - 1 if attached else length


def extract_priority(text: str) -> Tuple[str, Optional[TaskPriority]]:
    """Pull exclamation-mark priority markers out of a title.

    Returns:
        Tuple of (title without marks, priority or None when no marks count)
    """
    marks = max((_run_weight(text, match) for match in EXCLAMATION_RUN.finditer(text)), default=0)
    title = " ".join(EXCLAMATION_RUN.sub(" ", text).split())
    if marks >= 3:
        return title, TaskPriority.HIGH
    return title, MARKS_TO_PRIORITY.get(marks)


def parse_text_line(line: str) -> Optional[Task]:
    """Parse one line into a task (None if nothing is left of the title)."""
    text, completed = strip_marker(line.strip())
    title, priority = extract_priority(text)
    if not title:
        return None
    return create_task_base(title=title, completed=completed, priority=priority)


def parse_text_tasks(content: str) -> List[Task]:
    """Parse plain text, one task per non-blank line.

    Args:
        content: Text content

    Returns:
        Parsed tasks in line order (order values are reassigned on merge)

    Raises:
        ImportFormatError: If no line yields a task
    """
    tasks: List[Task] = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        task = parse_text_line(line)
        if task is None:
            logger.debug(f"Skipping text line {line_number}: empty title")
            continue
        tasks.append(task)

    if not tasks:
        raise ImportFormatError(NO_VALID_TASKS)

    logger.debug(f"Parsed {len(tasks)} tasks from text")
    return tasks


PRIORITY_SUFFIX = {
    TaskPriority.HIGH.value: " !!!",
    TaskPriority.MEDIUM.value: "",
    TaskPriority.LOW.value: " !",
}


def export_text(tasks: List[Task]) -> str:
    """Export tasks as checklist lines that parse_text_tasks reads back."""
    lines = []
    for task in tasks:
        marker = "- [x]" if task.completed else "- [ ]"
        # Marks inside the title would be read back as priority markers
        title = " ".join(EXCLAMATION_RUN.sub(" ", task.title).split()) or task.title
        lines.append(f"{marker} {title}{PRIORITY_SUFFIX.get(task.priority, '')}")
    return "\n".join(lines) + ("\n" if lines else "")
