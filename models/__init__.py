# models/__init__.py
from .task import Task, TaskStatus, TASKS_TABLE, TASK_COLUMNS, normalize_status, parse_status
from .project import Project, PROJECTS_TABLE, PROJECT_COLUMNS
