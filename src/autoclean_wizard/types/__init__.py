"""Typed models of the task settings tree."""

from .task_models import STEP_MODELS, SettingsPath, expand_step

__all__ = [
    "STEP_MODELS",
    "SettingsPath",
    "expand_step",
]
