"""Built-in starting points for a wizard task configuration."""

import copy
from typing import Any, Dict, Optional

# Default structure for a single task, also the base of the "Custom" start option.
DEFAULT_TASK_SETTINGS: Dict[str, Any] = {
    "mne_task": "RestingEyesOpen",
    "description": "",
    "dataset_name": "",
    "input_path": "",
    "settings": {
        "resample_step": {"enabled": True, "value": 250},
        "filtering": {
            "enabled": True,
            "value": {
                "l_freq": 1,
                "h_freq": 100,
                "notch_freqs": [60, 120],
                "notch_widths": 5,
            },
        },
        "drop_outerlayer": {"enabled": False, "value": []},
        "eog_step": {"enabled": False, "value": []},
        "trim_step": {"enabled": True, "value": 4},
        "crop_step": {"enabled": False, "value": {"start": 0, "end": None}},
        "reference_step": {"enabled": True, "value": "average"},
        "montage": {"enabled": True, "value": "GSN-HydroCel-129"},
        "ICA": {
            "enabled": True,
            "value": {
                "method": "infomax",
                "n_components": None,
                "fit_params": {"extended": True},
            },
        },
        "component_rejection": {
            "enabled": True,
            "method": "iclabel",
            "value": {
                "ic_flags_to_reject": ["muscle", "heart", "eog", "ch_noise", "line_noise"],
                "ic_rejection_threshold": 0.3,
                "ic_rejection_overrides": {},
                "psd_fmax": 50,
            },
        },
        "epoch_settings": {
            "enabled": True,
            "value": {"tmin": -1, "tmax": 1},
            "event_id": None,
            "remove_baseline": {"enabled": False, "window": [None, 0]},
            "threshold_rejection": {"enabled": False, "volt_threshold": {"eeg": 125e-6}},
        },
    },
}

_EGI_OUTER_LAYER = [
    "E17", "E38", "E43", "E44", "E48", "E49", "E113", "E114", "E119",
    "E120", "E121", "E56", "E63", "E68", "E73", "E81", "E88", "E94",
    "E99", "E107",
]


def _template(mne_task: str, description: str, **overrides: Any) -> Dict[str, Any]:
    task = copy.deepcopy(DEFAULT_TASK_SETTINGS)
    task["mne_task"] = mne_task
    task["description"] = description
    for step_key, step in overrides.items():
        task["settings"][step_key] = step
    return task


TASK_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "RestingState": _template(
        "RestingState",
        "Resting state EEG recording",
        eog_step={"enabled": False, "value": [1, 32, 8, 14, 17, 21, 25, 125, 126, 127, 128]},
        crop_step={"enabled": False, "value": {"start": 0, "end": 60}},
    ),
    "EventBased": _template(
        "EventBased",
        "Event-based EEG paradigm with stimulus triggers",
        drop_outerlayer={"enabled": False, "value": list(_EGI_OUTER_LAYER)},
        crop_step={"enabled": False, "value": {"start": 0, "end": 120}},
        reference_step={"enabled": False, "value": "average"},
        epoch_settings={
            "enabled": True,
            "value": {"tmin": -0.5, "tmax": 2.5},
            "event_id": ["DIN8"],
            "remove_baseline": {"enabled": False, "window": [None, 0]},
            "threshold_rejection": {"enabled": False, "volt_threshold": {"eeg": 125e-6}},
        },
    ),
}

CUSTOM_TASK_NAME = "CustomTask"


def get_task_config(template_name: Optional[str]) -> Dict[str, Any]:
    """Deep copy of a built-in template, or of the default custom task.

    Parameters
    ----------
    template_name : str or None
        Key of ``TASK_TEMPLATES``. Anything else (including ``"Custom"``)
        yields the default task renamed to ``CustomTask``.
    """
    if template_name and template_name in TASK_TEMPLATES:
        return copy.deepcopy(TASK_TEMPLATES[template_name])

    custom_task = copy.deepcopy(DEFAULT_TASK_SETTINGS)
    custom_task["mne_task"] = CUSTOM_TASK_NAME
    custom_task["description"] = "Custom task configuration"
    return custom_task
