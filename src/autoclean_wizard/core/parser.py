"""Read a generated task file back into a wizard configuration.

This is not a Python parser. It recovers the ``config = {...}`` literal the
generator wrote (or a hand-written file of the same shape) and rebuilds the
settings tree from it. Files that stray from that shape may fail to parse.
"""

import ast
import io
import json
import re
import tokenize
from typing import Any, Dict, List, Optional, Tuple

from schema import And, Schema

from autoclean_wizard.core.mutation import get_first_task_name
from autoclean_wizard.types.task_models import STEP_MODELS, expand_step
from autoclean_wizard.utils.logging import message

__all__ = [
    "PythonConfigParseError",
    "python_literal_to_json",
    "parse_python_dict",
    "parse_python_task_file",
    "validate_parsed_config",
]

DEFAULT_CLASS_NAME = "CustomTask"
DEFAULT_DESCRIPTION = "Custom Task"
TASK_LEVEL_KEYS = ("dataset_name", "input_path")

_CONFIG_RE = re.compile(r"^config\s*=\s*(\{[\s\S]*?\})\s*(?:\n\nclass|\nclass|\Z)", re.MULTILINE)
_CLASS_RE = re.compile(r"^class\s+(\w+)\s*\(", re.MULTILINE)
_DESCRIPTION_RE = re.compile(r"#\s*=+\s*\n#\s+(.+?)\s+EEG PREPROCESSING CONFIGURATION")

_NAME_LITERALS = {"True": "true", "False": "false", "None": "null"}
_SKIPPED_TOKENS = {
    tokenize.COMMENT,
    tokenize.NL,
    tokenize.NEWLINE,
    tokenize.INDENT,
    tokenize.DEDENT,
    tokenize.ENDMARKER,
}


class PythonConfigParseError(ValueError):
    """The task file does not contain a config literal this module can read."""


def _json_scalar(token: tokenize.TokenInfo) -> str:
    value = ast.literal_eval(token.string)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise PythonConfigParseError(f"Unsupported literal {token.string!r} at line {token.start[0]}")
    return json.dumps(value)


def python_literal_to_json(text: str) -> str:
    """Rewrite a Python dict literal as JSON text.

    Token-level rewrite: ``True``/``False``/``None`` become JSON literals,
    string and number tokens are re-encoded as JSON, comments are dropped, and
    trailing commas before ``}``/``]`` are removed. Everything else is copied
    through, so non-literal Python produces invalid JSON.

    Raises
    ------
    PythonConfigParseError
        If ``text`` cannot be tokenized (e.g. unbalanced brackets).
    """
    out: List[str] = []
    try:
        for token in tokenize.generate_tokens(io.StringIO(text).readline):
            if token.type in _SKIPPED_TOKENS:
                continue
            if token.type == tokenize.NAME:
                out.append(_NAME_LITERALS.get(token.string, token.string))
            elif token.type in (tokenize.STRING, tokenize.NUMBER):
                out.append(_json_scalar(token))
            elif token.type == tokenize.OP and token.string in ("}", "]") and out and out[-1] == ",":
                out[-1] = token.string
            else:
                out.append(token.string)
    except (tokenize.TokenError, SyntaxError, ValueError) as e:
        raise PythonConfigParseError(f"Failed to tokenize configuration dictionary: {e}") from e
    return "".join(out)


def parse_python_dict(text: str) -> Dict[str, Any]:
    """Parse a Python dict literal into a plain dict.

    Raises
    ------
    PythonConfigParseError
        If the text is not a readable dict literal.
    """
    try:
        parsed = json.loads(python_literal_to_json(text))
    except json.JSONDecodeError as e:
        raise PythonConfigParseError(f"Failed to parse Python configuration dictionary: {e}") from e
    if not isinstance(parsed, dict):
        raise PythonConfigParseError("Configuration literal is not a dictionary")
    return parsed


def _event_id_for_editing(event_id: Any) -> Any:
    # mappings go back to the JSON string form the validator understands
    if isinstance(event_id, dict):
        return json.dumps(event_id, separators=(",", ":")) if event_id else None
    if isinstance(event_id, (str, list)):
        return event_id or None
    return None


def _convert_settings(config_obj: Dict[str, Any]) -> Dict[str, Any]:
    settings: Dict[str, Any] = {}
    for key, value in config_obj.items():
        if key in TASK_LEVEL_KEYS:
            continue
        step = expand_step(key, value)
        if step is None:
            # unknown steps are kept verbatim
            settings[key] = value
            continue
        if key == "epoch_settings":
            step["event_id"] = _event_id_for_editing(step.get("event_id"))
        settings[key] = step
    return settings


def parse_python_task_file(python_content: str) -> Optional[Dict[str, Any]]:
    """Rebuild a wizard configuration from task file text.

    Parameters
    ----------
    python_content : str
        Source of a task file produced by ``generate_task_script``.

    Returns
    -------
    dict or None
        ``{"tasks": {<class name>: task}}``, or None if the file could not be
        parsed. Failures are logged, never raised.
    """
    try:
        config_match = _CONFIG_RE.search(python_content)
        if not config_match:
            raise PythonConfigParseError("Could not find config dictionary in Python file")

        config_obj = parse_python_dict(config_match.group(1))

        class_match = _CLASS_RE.search(python_content)
        description_match = _DESCRIPTION_RE.search(python_content)
        class_name = class_match.group(1) if class_match else DEFAULT_CLASS_NAME
        description = description_match.group(1).strip() if description_match else DEFAULT_DESCRIPTION

        task = {
            "mne_task": class_name,
            "description": description or DEFAULT_DESCRIPTION,
        }
        for key in TASK_LEVEL_KEYS:
            value = config_obj.get(key)
            task[key] = value if isinstance(value, str) else ""
        task["settings"] = _convert_settings(config_obj)

    except Exception as e:
        message("error", f"Error parsing Python file: {e}")
        return None

    message("debug", f"Parsed task {class_name} with {len(task['settings'])} settings")
    return {"tasks": {class_name: task}}


_NON_EMPTY_STR = And(str, lambda s: s.strip() != "")
_TASK_CHECKS: Tuple[Tuple[str, Schema, str], ...] = (
    ("mne_task", Schema(_NON_EMPTY_STR), "Task name is missing"),
    ("description", Schema(_NON_EMPTY_STR), "Task description is missing"),
    ("settings", Schema(dict), "Task settings are missing"),
)
_STEP_SCHEMA = Schema({"enabled": bool}, ignore_extra_keys=True)


def validate_parsed_config(config: Optional[Dict[str, Any]]) -> Tuple[bool, List[str]]:
    """Shallow completeness check of a parsed configuration.

    Returns
    -------
    tuple of (bool, list of str)
        Whether the configuration is usable, and the reasons when it is not.
    """
    errors: List[str] = []
    tasks = config.get("tasks") if isinstance(config, dict) else None
    task_name = get_first_task_name(tasks) if isinstance(tasks, dict) else None
    if task_name is None:
        return False, ["No tasks found in configuration"]

    task = tasks[task_name]
    if not isinstance(task, dict):
        return False, [f"Task {task_name} is not a mapping"]

    for key, check, reason in _TASK_CHECKS:
        if not check.is_valid(task.get(key)):
            errors.append(reason)

    settings = task.get("settings")
    if isinstance(settings, dict):
        for step_key, step in settings.items():
            if step_key in STEP_MODELS and not _STEP_SCHEMA.is_valid(step):
                errors.append(f"Step '{step_key}' is missing a boolean 'enabled' flag")

    return not errors, errors
