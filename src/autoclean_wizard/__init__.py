"""Configuration wizard core for the AutoClean EEG pipeline.

This package builds AutoClean task configurations, validates them, renders
them into Python task files, and reads those files back.
"""

from .core.generation import GenerationError, TemplateError, generate_task_script
from .core.mutation import apply_change, rename_task
from .core.parser import parse_python_task_file, validate_parsed_config
from .core.session import TaskFileDownload, WizardSession
from .core.validation import validate_config

__version__ = "0.1.0"

__all__ = [
    "WizardSession",
    "TaskFileDownload",
    "apply_change",
    "rename_task",
    "validate_config",
    "generate_task_script",
    "parse_python_task_file",
    "validate_parsed_config",
    "GenerationError",
    "TemplateError",
]
