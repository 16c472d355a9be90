"""Render a wizard configuration into an AutoClean Python task file."""

import copy
import math
import re
from typing import Any, Dict, Optional, Tuple

import yaml

from autoclean_wizard.core.mutation import get_first_task_name, sanitize_task_name
from autoclean_wizard.templates.task_script import PLACEHOLDERS, TASK_SCRIPT_TEMPLATE
from autoclean_wizard.types.task_models import (
    COMPONENT_CLASSIFICATION_METHODS,
    LIST_PATHS,
    NUMERIC_PATHS,
    SettingsPath,
)
from autoclean_wizard.utils.logging import message

__all__ = [
    "GenerationError",
    "TemplateError",
    "coerce_token",
    "coerce_list_field",
    "coerce_number",
    "event_id_to_mapping",
    "normalize_task",
    "to_python_literal",
    "derive_class_name",
    "fill_template",
    "epoching_code",
    "component_classification_code",
    "generate_task_script",
    "task_file_name",
]

FALLBACK_CLASS_NAME = "CustomTask"
FALLBACK_DESCRIPTION = "EEG processing task"
INDENT = "    "

_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_]+)\}\}")


class GenerationError(ValueError):
    """The configuration could not be rendered into a task file."""


class TemplateError(GenerationError):
    """The task script template and the generator disagree on placeholders."""


# ---------------------------------------------------------------------------
# Type normalization
# ---------------------------------------------------------------------------


def coerce_number(value: Any) -> Optional[float]:
    """Parse ``value`` as a finite number, or return None.

    Integral literals stay ``int`` ("250" -> 250), everything else becomes
    ``float`` ("150e-6" -> 0.00015). Booleans are not numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if "_" in text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def coerce_token(token: Any) -> Any:
    """Coerce one list element: ``"null"`` -> None, numeric strings -> numbers."""
    if not isinstance(token, str):
        return token
    if token.strip().lower() == "null":
        return None
    number = coerce_number(token)
    return token if number is None else number


def coerce_list_field(value: Any) -> Any:
    """Normalize a list-like field.

    A comma-separated string is split, each token trimmed and coerced, and
    empty tokens dropped (``"1, 2, null, foo"`` -> ``[1, 2, None, "foo"]``).
    A list is coerced element-wise. Anything else is returned as is.
    """
    if isinstance(value, str):
        tokens = (token.strip() for token in value.split(","))
        return [coerce_token(token) for token in tokens if token != ""]
    if isinstance(value, list):
        return [coerce_token(item) for item in value]
    return value


def event_id_to_mapping(event_id: Any) -> Any:
    """Normalize ``event_id`` to the mapping the pipeline expects.

    A list of markers becomes ``{marker: 1..n}`` over distinct markers in
    order. An empty list, empty string, or None becomes None (fixed-length
    epochs). A mapping string (JSON or YAML) is parsed. Anything that does not
    parse to a mapping is returned unchanged.
    """
    if event_id is None:
        return None
    if isinstance(event_id, dict):
        return event_id or None
    if isinstance(event_id, list):
        mapping: Dict[str, int] = {}
        for marker in event_id:
            marker = str(marker).strip()
            if marker and marker not in mapping:
                mapping[marker] = len(mapping) + 1
        return mapping or None
    if isinstance(event_id, str):
        if not event_id.strip():
            return None
        try:
            parsed = yaml.safe_load(event_id)
        except yaml.YAMLError as e:
            message("warning", f"Failed to parse event_id string: {e}")
            return event_id
        if isinstance(parsed, (dict, list)):
            return event_id_to_mapping(parsed)
        return event_id
    return event_id


def _resolve_parent(task: Dict[str, Any], path: SettingsPath) -> Tuple[Optional[Dict[str, Any]], str]:
    current: Any = task
    parts = path.parts
    for part in parts[:-1]:
        current = current.get(part) if isinstance(current, dict) else None
        if current is None:
            return None, parts[-1]
    return (current if isinstance(current, dict) else None), parts[-1]


def normalize_task(task: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy of ``task`` with every known field coerced to its final type.

    Numeric fields that do not parse keep their raw value; ``validate_config``
    reports them.
    """
    normalized = copy.deepcopy(task)

    for path in LIST_PATHS:
        parent, key = _resolve_parent(normalized, path)
        if parent is not None and key in parent:
            parent[key] = coerce_list_field(parent[key])

    for path in NUMERIC_PATHS:
        parent, key = _resolve_parent(normalized, path)
        if parent is None or parent.get(key) is None:
            continue
        number = coerce_number(parent[key])
        if number is not None:
            parent[key] = number

    parent, key = _resolve_parent(normalized, SettingsPath.EVENT_ID)
    if parent is not None and key in parent:
        parent[key] = event_id_to_mapping(parent[key])

    return normalized


# ---------------------------------------------------------------------------
# Python literal rendering
# ---------------------------------------------------------------------------


def _quote(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f"'{escaped}'"


def to_python_literal(obj: Any, depth: int = 0) -> str:
    """Render ``obj`` as Python source.

    Dicts are rendered one ``'key': value`` pair per line, indented four
    spaces per nesting level. Lists are rendered inline.

    Raises
    ------
    GenerationError
        For values with no literal form (non-finite floats, arbitrary objects).
    """
    if obj is None:
        return "None"
    if isinstance(obj, bool):
        return "True" if obj else "False"
    if isinstance(obj, (int, float)):
        if isinstance(obj, float) and not math.isfinite(obj):
            raise GenerationError(f"Cannot render non-finite number {obj!r}")
        return repr(obj)
    if isinstance(obj, str):
        return _quote(obj)
    if isinstance(obj, (list, tuple)):
        return "[" + ", ".join(to_python_literal(item, depth) for item in obj) + "]"
    if isinstance(obj, dict):
        if not obj:
            return "{}"
        inner = INDENT * (depth + 1)
        lines = [
            f"{inner}{_quote(str(key))}: {to_python_literal(value, depth + 1)}"
            for key, value in obj.items()
        ]
        return "{\n" + ",\n".join(lines) + "\n" + INDENT * depth + "}"
    raise GenerationError(f"Cannot render value of type {type(obj).__name__}")


# ---------------------------------------------------------------------------
# Derived identifiers and code lines
# ---------------------------------------------------------------------------


def derive_class_name(name: Any, fallback: str = FALLBACK_CLASS_NAME) -> str:
    """Python class name for a task name.

    >>> derive_class_name("my task!")
    'My_task'
    >>> derive_class_name("1st run")
    '_1st_run'
    """
    class_name = sanitize_task_name(name) if isinstance(name, str) else ""
    if class_name[:1].isdigit():
        class_name = "_" + class_name
    if not class_name:
        class_name = fallback
    return class_name[0].upper() + class_name[1:]


def epoching_code(epoch_settings: Optional[Dict[str, Any]]) -> str:
    if not isinstance(epoch_settings, dict) or not epoch_settings.get("enabled"):
        return "# Epoching disabled via configuration"
    if epoch_settings.get("event_id"):
        return "self.create_eventid_epochs()  # Using event IDs"
    return "self.create_regular_epochs()  # Using fixed-length epochs"


def component_classification_code(component_rejection: Optional[Dict[str, Any]]) -> str:
    if not isinstance(component_rejection, dict) or not component_rejection.get("enabled"):
        return "# Component classification disabled via configuration"
    method = component_rejection.get("method") or "iclabel"
    if method not in COMPONENT_CLASSIFICATION_METHODS:
        message("warning", f"Unsupported component classification method: {method}")
        return f"# Component classification method '{method}' is not supported"
    return f"self.classify_ica_components(method='{method}')"


def _banner_text(text: Any, fallback: str) -> str:
    if not isinstance(text, str) or not text.strip():
        return fallback
    return " ".join(text.split())


def fill_template(template: str, values: Dict[str, str]) -> str:
    """Substitute ``{{NAME}}`` placeholders in one pass.

    Raises
    ------
    TemplateError
        If a placeholder in ``values`` is absent from ``template``, or the
        template uses a placeholder with no value.
    """
    present = set(_PLACEHOLDER_RE.findall(template))
    missing = [name for name in values if name not in present]
    if missing:
        raise TemplateError(f"Template is missing placeholder(s): {', '.join(missing)}")
    unknown = sorted(present - set(values))
    if unknown:
        raise TemplateError(f"No value for template placeholder(s): {', '.join(unknown)}")
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def _config_literal(task: Dict[str, Any]) -> str:
    config_dict: Dict[str, Any] = {}
    for key in ("dataset_name", "input_path"):
        value = task.get(key)
        if isinstance(value, str) and value.strip():
            config_dict[key] = value.strip()
    settings = task.get("settings") or {}
    if not isinstance(settings, dict):
        raise GenerationError("Task settings must be a mapping")
    config_dict.update(settings)
    return to_python_literal(config_dict)


def generate_task_script(
    config: Dict[str, Any],
    template: str = TASK_SCRIPT_TEMPLATE,
    fallback_class_name: str = FALLBACK_CLASS_NAME,
) -> str:
    """Generate the task file for the first task of ``config``.

    Parameters
    ----------
    config : dict
        Wizard configuration, ``{"tasks": {<task key>: {...}}}``.
    template : str
        Task script template; must contain every name in ``PLACEHOLDERS``.
    fallback_class_name : str
        Class name used when the task name sanitizes to nothing.

    Returns
    -------
    str
        Complete Python source. Identical input gives identical output.

    Raises
    ------
    GenerationError
        If there is no task or a value cannot be rendered.
    TemplateError
        If ``template`` is missing a placeholder.

    Notes
    -----
    The description, dataset name and input path are written into the banner
    comment with runs of whitespace collapsed to single spaces. The description
    is only stored in the banner, so a multi-line description is read back by
    ``parse_python_task_file`` as one line. ``dataset_name`` and ``input_path``
    are also kept verbatim in the ``config`` literal.
    """
    tasks = config.get("tasks") if isinstance(config, dict) else None
    task_key = get_first_task_name(tasks)
    if task_key is None or not isinstance(tasks[task_key], dict):
        raise GenerationError("Task data not found in config for task script generation.")

    task = normalize_task(tasks[task_key])
    settings = task.get("settings") or {}

    values = {
        "TASK_DESCRIPTION": _banner_text(task.get("description"), FALLBACK_DESCRIPTION),
        "CLASS_NAME": derive_class_name(task.get("mne_task") or task_key, fallback_class_name),
        "CONFIG_DICT": _config_literal(task),
        "EPOCHING_CODE": epoching_code(settings.get("epoch_settings")),
        "COMPONENT_CLASSIFICATION_CODE": component_classification_code(
            settings.get("component_rejection")
        ),
        "DATASET_NAME": _banner_text(task.get("dataset_name"), "(not set)"),
        "INPUT_PATH": _banner_text(task.get("input_path"), "(not set)"),
    }
    if set(values) != set(PLACEHOLDERS):
        raise TemplateError("Generator values do not match the declared template placeholders")

    script = fill_template(template, values)
    message("debug", f"Generated task script for {values['CLASS_NAME']} ({len(script)} chars)")
    return script


def task_file_name(config: Dict[str, Any]) -> str:
    """Download name for the generated file: ``<task key lower>.py`` or ``task.py``."""
    tasks = config.get("tasks") if isinstance(config, dict) else None
    task_key = get_first_task_name(tasks)
    return f"{task_key.lower()}.py" if task_key else "task.py"
