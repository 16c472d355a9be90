"""Built-in task configurations and the task file template."""

from .config_templates import TASK_TEMPLATES, get_task_config
from .task_script import PLACEHOLDERS, TASK_SCRIPT_TEMPLATE

__all__ = [
    "TASK_TEMPLATES",
    "get_task_config",
    "PLACEHOLDERS",
    "TASK_SCRIPT_TEMPLATE",
]
