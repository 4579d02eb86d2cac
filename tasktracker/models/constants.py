"""Constants for the task tracker.

This module centralizes storage keys and default values used throughout the application.
"""

import os

from dotenv import load_dotenv

from tasktracker.models.task import TaskPriority

load_dotenv()


# Storage keys (shape kept compatible with the browser build's localStorage)
TASKS_STORAGE_KEY = "tasks"
DARK_MODE_STORAGE_KEY = "darkMode"

# Task defaults
DEFAULT_PRIORITY = TaskPriority.MEDIUM
MAX_TITLE_LENGTH = 200  # Enforced at the input boundary, mirrors the input form

# Theme: later revisions switched the default from light to dark
DEFAULT_DARK_MODE = os.getenv("TASKTRACKER_DARK_MODE_DEFAULT", "true").lower() == "true"

# Export
JSON_EXPORT_INDENT = 2
TAG_SEPARATOR = ";"
