"""Field-level validation of a wizard configuration.

``validate_config`` returns a mapping from the dot path of each offending
field to a human readable message. Only enabled steps are checked, and
numeric fields are accepted in their typed-in string form as long as they
parse.
"""

import re
from typing import Any, Callable, Dict, Optional

import yaml

from autoclean_wizard.core.generation import coerce_list_field, coerce_number
from autoclean_wizard.core.mutation import get_first_task_name
from autoclean_wizard.types.task_models import (
    COMPONENT_CLASSIFICATION_METHODS,
    IC_LABELS,
    ICA_METHODS,
)
from autoclean_wizard.utils.logging import message
from autoclean_wizard.utils.montage import VALID_MONTAGES, is_valid_montage

__all__ = ["validate_config", "REQUIRED_FIELD_MESSAGE"]

REQUIRED_FIELD_MESSAGE = "This field is required."
MISSING_TASK_MESSAGE = "Configuration is missing task data."

_CHANNEL_LIST_RE = re.compile(r"^([a-zA-Z0-9_-]+(,\s*)?)*$")

Errors = Dict[str, str]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _step(settings: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    """The step dict when it exists and is enabled."""
    step = settings.get(key)
    if isinstance(step, dict) and step.get("enabled"):
        return step
    return None


def _value(step: Dict[str, Any]) -> Dict[str, Any]:
    value = step.get("value")
    return value if isinstance(value, dict) else {}


def _check_number(
    errors: Errors,
    path: str,
    value: Any,
    text: str,
    valid: Callable[[float], bool],
    optional: bool = False,
) -> Optional[float]:
    """Record ``text`` at ``path`` unless ``value`` parses and satisfies ``valid``.

    Returns the parsed number, or None when missing or invalid.
    """
    if optional and _is_blank(value):
        return None
    number = coerce_number(value)
    if number is None or not valid(number):
        errors[path] = text
        return None
    return number


# ---------------------------------------------------------------------------
# Per-step checks
# ---------------------------------------------------------------------------


def _check_resample(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    _check_number(
        errors, f"{path}.value", step.get("value"),
        "Resample value must be a positive number.", lambda v: v > 0,
    )


def _check_trim(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    _check_number(
        errors, f"{path}.value", step.get("value"),
        "Trim duration must be a positive number of seconds.", lambda v: v > 0,
    )


def _check_crop(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    crop = _value(step)
    start = _check_number(
        errors, f"{path}.value.start", crop.get("start"),
        "Crop start must be a non-negative number.", lambda v: v >= 0,
    )
    end = _check_number(
        errors, f"{path}.value.end", crop.get("end"),
        "Crop end must be a positive number or null.", lambda v: v > 0, optional=True,
    )
    if start is not None and end is not None and end <= start:
        errors[f"{path}.value.end"] = "Crop end must be greater than crop start."


def _notch_freqs_valid(notch_freqs: Any) -> bool:
    if _is_blank(notch_freqs):
        return True
    if isinstance(notch_freqs, (str, list)):
        freqs = coerce_list_field(notch_freqs)
        return all(coerce_number(freq) is not None and coerce_number(freq) > 0 for freq in freqs)
    number = coerce_number(notch_freqs)
    return number is not None and number > 0


def _check_filtering(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    filtering = _value(step)
    value_path = f"{path}.value"
    l_freq = _check_number(
        errors, f"{value_path}.l_freq", filtering.get("l_freq"),
        "Low frequency must be a positive number or null.", lambda v: v >= 0, optional=True,
    )
    h_freq = _check_number(
        errors, f"{value_path}.h_freq", filtering.get("h_freq"),
        "High frequency must be a positive number or null.", lambda v: v > 0, optional=True,
    )
    if l_freq is not None and h_freq is not None and h_freq <= l_freq:
        errors[f"{value_path}.h_freq"] = "High frequency must be greater than low frequency."
    _check_number(
        errors, f"{value_path}.notch_widths", filtering.get("notch_widths"),
        "Notch width must be a positive number.", lambda v: v > 0, optional=True,
    )
    if not _notch_freqs_valid(filtering.get("notch_freqs")):
        errors[f"{value_path}.notch_freqs"] = "Notch frequencies must be positive numbers separated by commas."


def _check_channel_list(allow_numbers: bool) -> Callable[[Errors, str, Dict[str, Any]], None]:
    allowed = (str, int, float) if allow_numbers else (str,)

    def check(errors: Errors, path: str, step: Dict[str, Any]) -> None:
        value = step.get("value")
        if isinstance(value, str):
            if value.strip() and not _CHANNEL_LIST_RE.match(value.strip()):
                errors[f"{path}.value"] = "Enter comma-separated channel names (alphanumeric, _, - allowed)."
        elif isinstance(value, list):
            if any(isinstance(item, bool) or not isinstance(item, allowed) for item in value):
                errors[f"{path}.value"] = "Invalid format for channel list."
        elif value is not None:
            errors[f"{path}.value"] = "Invalid format for channel list."

    return check


def _check_reference(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    value = step.get("value")
    if isinstance(value, list) and value:
        return
    if _is_blank(value) or not isinstance(value, str):
        errors[f"{path}.value"] = "Reference must be 'average' or a list of channel names."


def _check_montage(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    value = step.get("value")
    if _is_blank(value):
        errors[f"{path}.value"] = "Montage is required."
    elif not is_valid_montage(value):
        errors[f"{path}.value"] = (
            f"Unknown montage '{value}'. Supported montages: {', '.join(VALID_MONTAGES)}."
        )


def _check_ica(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    ica = _value(step)
    value_path = f"{path}.value"
    method = ica.get("method")
    if _is_blank(method):
        errors[f"{value_path}.method"] = "ICA method is required."
    elif method not in ICA_METHODS:
        errors[f"{value_path}.method"] = f"ICA method must be one of: {', '.join(ICA_METHODS)}."
    _check_number(
        errors, f"{value_path}.n_components", ica.get("n_components"),
        "Number of ICA components must be a positive number or null for automatic.",
        lambda v: v > 0, optional=True,
    )


def _check_flags(errors: Errors, path: str, flags: Any) -> None:
    flags = coerce_list_field(flags)
    if flags is None:
        return
    if not isinstance(flags, list):
        errors[path] = "Component flags must be a list of ICLabel categories."
        return
    unknown = [str(flag) for flag in flags if flag not in IC_LABELS]
    if unknown:
        errors[path] = f"Unknown component categories: {', '.join(unknown)}."


def _check_probability(errors: Errors, path: str, value: Any) -> None:
    _check_number(
        errors, path, value,
        "IC rejection threshold must be between 0 and 1.", lambda v: 0 <= v <= 1,
    )


def _check_component_rejection(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    method = step.get("method", "iclabel")
    if method not in COMPONENT_CLASSIFICATION_METHODS:
        errors[f"{path}.method"] = (
            f"Classification method must be one of: {', '.join(COMPONENT_CLASSIFICATION_METHODS)}."
        )

    rejection = _value(step)
    value_path = f"{path}.value"
    _check_probability(errors, f"{value_path}.ic_rejection_threshold", rejection.get("ic_rejection_threshold"))

    overrides = rejection.get("ic_rejection_overrides")
    if isinstance(overrides, dict):
        invalid = [
            label for label, threshold in overrides.items()
            if isinstance(threshold, bool)
            or not isinstance(threshold, (int, float))
            or not 0 <= threshold <= 1
        ]
        if invalid:
            errors[f"{value_path}.ic_rejection_overrides"] = "Override values must be between 0 and 1."
    elif overrides is not None:
        errors[f"{value_path}.ic_rejection_overrides"] = "Overrides must map component categories to thresholds."

    _check_number(
        errors, f"{value_path}.psd_fmax", rejection.get("psd_fmax"),
        "PSD fmax must be a positive number.", lambda v: v > 0, optional=True,
    )
    _check_number(
        errors, f"{value_path}.icvision_n_components", rejection.get("icvision_n_components"),
        "Number of ICVision components must be a positive number.", lambda v: v > 0, optional=True,
    )
    _check_flags(errors, f"{value_path}.ic_flags_to_reject", rejection.get("ic_flags_to_reject"))


def _check_iclabel(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    iclabel = _value(step)
    _check_probability(errors, f"{path}.value.ic_rejection_threshold", iclabel.get("ic_rejection_threshold"))
    _check_flags(errors, f"{path}.value.ic_flags_to_reject", iclabel.get("ic_flags_to_reject"))


def _event_id_error(event_id: Any) -> Optional[str]:
    if event_id is None:
        return None
    if isinstance(event_id, str):
        if not event_id.strip():
            return None
        try:
            parsed = yaml.safe_load(event_id)
        except yaml.YAMLError:
            return "Invalid Event ID format. Must be a valid YAML/JSON dictionary string."
        if not isinstance(parsed, dict):
            return "Event ID must be a valid YAML/JSON dictionary string (e.g., {\"DIN8\": 1})."
        return None
    if isinstance(event_id, list):
        markers = [marker.strip() for marker in event_id if isinstance(marker, str)]
        if len(markers) != len(event_id) or not all(markers):
            return "Event markers must be non-empty strings."
        if len(set(markers)) != len(markers):
            return "Event markers must be unique."
        return None
    if isinstance(event_id, dict):
        return None
    return "Event ID must be a list of markers or a dictionary."


def _check_epochs(errors: Errors, path: str, step: Dict[str, Any]) -> None:
    epoch = _value(step)
    tmin = _check_number(
        errors, f"{path}.value.tmin", epoch.get("tmin"),
        "Epoch start (tmin) must be a number.", lambda v: True,
    )
    tmax = _check_number(
        errors, f"{path}.value.tmax", epoch.get("tmax"),
        "Epoch end (tmax) must be a number.", lambda v: True,
    )
    if tmin is not None and tmax is not None and tmax <= tmin:
        errors[f"{path}.value.tmax"] = "Epoch end (tmax) must be greater than epoch start (tmin)."

    event_error = _event_id_error(step.get("event_id"))
    if event_error:
        errors[f"{path}.event_id"] = event_error

    baseline = step.get("remove_baseline")
    if isinstance(baseline, dict) and baseline.get("enabled"):
        window = coerce_list_field(baseline.get("window"))
        if (
            not isinstance(window, list)
            or len(window) != 2
            or any(item is not None and coerce_number(item) is None for item in window)
        ):
            errors[f"{path}.remove_baseline.window"] = (
                "Baseline window must be an array of two numbers or null (e.g., [-0.1, 0] or [null, 0])."
            )

    rejection = step.get("threshold_rejection")
    if isinstance(rejection, dict) and rejection.get("enabled"):
        volt_threshold = rejection.get("volt_threshold")
        eeg = volt_threshold.get("eeg") if isinstance(volt_threshold, dict) else volt_threshold
        threshold_path = f"{path}.threshold_rejection.volt_threshold.eeg"
        number = coerce_number(eeg)
        if number is None:
            errors[threshold_path] = "EEG Threshold must be a valid number (e.g., 150e-6)."
        elif number <= 0:
            errors[threshold_path] = "EEG Threshold must be positive."


_STEP_CHECKS: Dict[str, Callable[[Errors, str, Dict[str, Any]], None]] = {
    "resample_step": _check_resample,
    "trim_step": _check_trim,
    "crop_step": _check_crop,
    "filtering": _check_filtering,
    "drop_outerlayer": _check_channel_list(allow_numbers=False),
    "eog_step": _check_channel_list(allow_numbers=True),
    "reference_step": _check_reference,
    "montage": _check_montage,
    "ICA": _check_ica,
    "ICLabel": _check_iclabel,
    "component_rejection": _check_component_rejection,
    "epoch_settings": _check_epochs,
}


def validate_config(config: Dict[str, Any]) -> Dict[str, str]:
    """Validate the first task of a wizard configuration.

    Parameters
    ----------
    config : dict
        Wizard configuration, ``{"tasks": {<task key>: {...}}}``.

    Returns
    -------
    dict
        ``{<dot path>: <message>}``; empty when the configuration is valid.
        A configuration without a task yields a single ``"general"`` entry.
        This function never raises.
    """
    tasks = config.get("tasks") if isinstance(config, dict) else None
    task_key = get_first_task_name(tasks) if isinstance(tasks, dict) else None
    if task_key is None or not isinstance(tasks[task_key], dict):
        return {"general": MISSING_TASK_MESSAGE}

    task = tasks[task_key]
    base_path = f"tasks.{task_key}"
    errors: Errors = {}

    if _is_blank(task.get("mne_task")):
        errors[f"{base_path}.mne_task"] = "Task name is required."

    settings = task.get("settings")
    if not isinstance(settings, dict):
        return errors

    for step_key, check in _STEP_CHECKS.items():
        step = _step(settings, step_key)
        if step is None:
            continue
        try:
            check(errors, f"{base_path}.settings.{step_key}", step)
        except Exception as e:
            message("error", f"Validation of {step_key} failed: {e}")
            errors[f"{base_path}.settings.{step_key}"] = f"Could not validate this step: {e}"

    if errors:
        message("debug", f"Validation found {len(errors)} error(s) in {task_key}")
    return errors
