"""Copy-on-write edits of the wizard configuration tree."""

import re
from typing import Any, Dict, List, Optional

from autoclean_wizard.types.task_models import MATERIALIZABLE_CONTAINERS
from autoclean_wizard.utils.logging import message

__all__ = [
    "apply_change",
    "rename_task",
    "sanitize_task_name",
    "get_first_task_name",
]


def get_first_task_name(tasks: Optional[Dict[str, Any]]) -> Optional[str]:
    """Return the first task key, or None when there is no task."""
    if not tasks:
        return None
    return next(iter(tasks))


def sanitize_task_name(name: str) -> str:
    """Turn free text into a task key: whitespace runs to ``_``, drop anything else non-word."""
    return re.sub(r"[^a-zA-Z0-9_]", "", re.sub(r"\s+", "_", name))


def _shallow_copy(node: Any) -> Any:
    if isinstance(node, dict):
        return dict(node)
    if isinstance(node, list):
        return list(node)
    return node


def _list_index(container: List[Any], segment: str) -> int:
    if not (segment.isdecimal() and segment.isascii()):
        raise TypeError(f"'{segment}' is not a list index")
    index = int(segment)
    if index >= len(container):
        raise IndexError(f"Index {index} out of bounds")
    return index


def _get_child(container: Any, segment: str) -> Any:
    if isinstance(container, dict):
        return container.get(segment)
    if isinstance(container, list):
        return container[_list_index(container, segment)]
    raise TypeError(f"Cannot select '{segment}' from {type(container).__name__}")


def _set_child(container: Any, segment: str, value: Any) -> None:
    if isinstance(container, dict):
        container[segment] = value
    elif isinstance(container, list):
        container[_list_index(container, segment)] = value
    else:
        raise TypeError(f"Cannot assign '{segment}' on {type(container).__name__}")


def apply_change(tree: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """Return a copy of ``tree`` with ``value`` stored at ``path``.

    Parameters
    ----------
    tree : dict
        Wizard configuration, ``{"tasks": {<task key>: {...}}}``. Never mutated.
    path : str
        Dot-separated keys and list indices, e.g.
        ``tasks.RestingState.settings.epoch_settings.remove_baseline.window.0``.
    value : Any
        New value for the last segment.

    Returns
    -------
    dict
        The updated tree. Every container on the path is a fresh copy, the rest
        is shared with ``tree``. On any error (unknown intermediate segment,
        index out of bounds, wrong container type) the original ``tree`` is
        returned unchanged.

    Notes
    -----
    Missing intermediate containers are only created for the pairs listed in
    ``MATERIALIZABLE_CONTAINERS``. Edits of ``tasks.<key>.mne_task`` are
    routed through ``rename_task``.
    """
    parts = path.split(".") if isinstance(path, str) else []
    if not parts or any(part == "" for part in parts):
        message("error", f"Invalid config path: {path!r}")
        return tree

    if len(parts) == 3 and parts[0] == "tasks" and parts[2] == "mne_task":
        return rename_task(tree, parts[1], value)

    try:
        new_tree = _shallow_copy(tree)
        current = new_tree
        for i, part in enumerate(parts[:-1]):
            child = _get_child(current, part)
            if child is None:
                factory = MATERIALIZABLE_CONTAINERS.get((parts[i - 1] if i else "", part))
                if factory is None:
                    message("error", f"Invalid path segment: {part} in path {path}")
                    return tree
                child = factory()
            else:
                child = _shallow_copy(child)
            _set_child(current, part, child)
            current = child

        _set_child(current, parts[-1], value)
    except (IndexError, KeyError, TypeError, ValueError) as e:
        message("error", f"Error updating config at path {path}: {e}")
        return tree

    return new_tree


def rename_task(tree: Dict[str, Any], task_key: str, new_name: Any) -> Dict[str, Any]:
    """Set a task's ``mne_task`` and re-key the task to match it.

    The raw ``new_name`` is stored as ``mne_task``. The task key becomes
    ``sanitize_task_name(new_name)`` when that is non-empty and differs from
    ``task_key``, and the task keeps its position among the tasks. An empty
    sanitized name only updates the field.

    Returns the original ``tree`` when the task does not exist, the name is
    not a string, or the new key is already used by another task.
    """
    tasks = tree.get("tasks") if isinstance(tree, dict) else None
    if not isinstance(tasks, dict) or not isinstance(tasks.get(task_key), dict):
        message("error", f"Cannot rename unknown task: {task_key}")
        return tree
    if not isinstance(new_name, str):
        message("error", f"Task name must be a string, got {type(new_name).__name__}")
        return tree

    new_key = sanitize_task_name(new_name)
    task = dict(tasks[task_key])
    task["mne_task"] = new_name

    if not new_key or new_key == task_key:
        new_tasks = dict(tasks)
        new_tasks[task_key] = task
    elif new_key in tasks:
        message("error", f"Cannot rename task {task_key} to {new_key}: name already in use")
        return tree
    else:
        new_tasks = {
            (new_key if key == task_key else key): (task if key == task_key else data)
            for key, data in tasks.items()
        }
        message("debug", f"Renamed task {task_key} -> {new_key}")

    new_tree = dict(tree)
    new_tree["tasks"] = new_tasks
    return new_tree
