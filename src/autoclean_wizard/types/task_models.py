# task_models.py
"""Typed shapes of the steps that make up a task's settings tree.

The wizard edits the settings tree as plain dictionaries (that is what ends up
in the generated ``config = {...}`` literal). These models describe the
canonical shape of each step and supply the defaults used when a parsed task
file omits a sub-field.
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SettingsPath(str, Enum):
    """Dot paths (relative to a task) the generator normalizes."""

    # list-like fields, may be typed as a comma-separated string while editing
    DROP_OUTERLAYER = "settings.drop_outerlayer.value"
    EOG_CHANNELS = "settings.eog_step.value"
    BASELINE_WINDOW = "settings.epoch_settings.remove_baseline.window"
    NOTCH_FREQS = "settings.filtering.value.notch_freqs"
    IC_FLAGS = "settings.component_rejection.value.ic_flags_to_reject"
    ICLABEL_FLAGS = "settings.ICLabel.value.ic_flags_to_reject"

    # numeric fields
    RESAMPLE_RATE = "settings.resample_step.value"
    TRIM_SECONDS = "settings.trim_step.value"
    CROP_START = "settings.crop_step.value.start"
    CROP_END = "settings.crop_step.value.end"
    L_FREQ = "settings.filtering.value.l_freq"
    H_FREQ = "settings.filtering.value.h_freq"
    NOTCH_WIDTHS = "settings.filtering.value.notch_widths"
    ICA_COMPONENTS = "settings.ICA.value.n_components"
    IC_THRESHOLD = "settings.component_rejection.value.ic_rejection_threshold"
    PSD_FMAX = "settings.component_rejection.value.psd_fmax"
    ICVISION_COMPONENTS = "settings.component_rejection.value.icvision_n_components"
    ICLABEL_THRESHOLD = "settings.ICLabel.value.ic_rejection_threshold"
    EPOCH_TMIN = "settings.epoch_settings.value.tmin"
    EPOCH_TMAX = "settings.epoch_settings.value.tmax"
    VOLT_THRESHOLD = "settings.epoch_settings.threshold_rejection.volt_threshold.eeg"

    # event markers
    EVENT_ID = "settings.epoch_settings.event_id"

    @property
    def parts(self) -> List[str]:
        return self.value.split(".")


LIST_PATHS: Tuple[SettingsPath, ...] = (
    SettingsPath.DROP_OUTERLAYER,
    SettingsPath.EOG_CHANNELS,
    SettingsPath.BASELINE_WINDOW,
    SettingsPath.NOTCH_FREQS,
    SettingsPath.IC_FLAGS,
    SettingsPath.ICLABEL_FLAGS,
)

NUMERIC_PATHS: Tuple[SettingsPath, ...] = (
    SettingsPath.RESAMPLE_RATE,
    SettingsPath.TRIM_SECONDS,
    SettingsPath.CROP_START,
    SettingsPath.CROP_END,
    SettingsPath.L_FREQ,
    SettingsPath.H_FREQ,
    SettingsPath.NOTCH_WIDTHS,
    SettingsPath.ICA_COMPONENTS,
    SettingsPath.IC_THRESHOLD,
    SettingsPath.PSD_FMAX,
    SettingsPath.ICVISION_COMPONENTS,
    SettingsPath.ICLABEL_THRESHOLD,
    SettingsPath.EPOCH_TMIN,
    SettingsPath.EPOCH_TMAX,
    SettingsPath.VOLT_THRESHOLD,
)

# (parent key, child key) -> factory for containers the mutator may create
MATERIALIZABLE_CONTAINERS: Dict[Tuple[str, str], Callable[[], Any]] = {
    ("epoch_settings", "value"): dict,
    ("crop_step", "value"): dict,
    ("remove_baseline", "window"): lambda: [None, None],
    ("threshold_rejection", "volt_threshold"): dict,
}

ICA_METHODS = ("infomax", "picard", "fastica")
COMPONENT_CLASSIFICATION_METHODS = ("iclabel", "icvision")
IC_LABELS = ("brain", "muscle", "eog", "heart", "line_noise", "ch_noise", "other")


class _Section(BaseModel):
    """Base for every step and nested value.

    Unknown sub-fields are kept so nothing in a task file is silently dropped,
    and a missing (``None``) section is rebuilt from its defaults.
    """

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _missing_as_empty(cls, data: Any) -> Any:
        return {} if data is None else data


class StepConfig(_Section):
    enabled: bool = False
    value: Any = None


# ---------------------------------------------------------------------------
# Simple steps
# ---------------------------------------------------------------------------


class ResampleStep(StepConfig):
    value: Any = 250


class TrimStep(StepConfig):
    value: Any = 0


class ReferenceStep(StepConfig):
    value: Any = "average"


class MontageStep(StepConfig):
    value: Any = ""


class ChannelListStep(StepConfig):
    value: List[Any] = Field(default_factory=list)

    @field_validator("value", mode="before")
    @classmethod
    def _list_or_empty(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []


# ---------------------------------------------------------------------------
# Steps with nested values
# ---------------------------------------------------------------------------


class FilteringValue(_Section):
    l_freq: Any = None
    h_freq: Any = None
    notch_freqs: Any = None
    notch_widths: Any = None


class FilteringStep(StepConfig):
    value: FilteringValue = Field(default_factory=FilteringValue)


class CropValue(_Section):
    start: Any = 0
    end: Any = None


class CropStep(StepConfig):
    value: CropValue = Field(default_factory=CropValue)


class ICAValue(_Section):
    method: Any = "infomax"
    n_components: Any = None
    # free-form: the keys depend on the ICA method
    fit_params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("fit_params", mode="before")
    @classmethod
    def _dict_or_empty(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}


class ICAStep(StepConfig):
    value: ICAValue = Field(default_factory=ICAValue)


class ICLabelValue(_Section):
    ic_flags_to_reject: List[Any] = Field(default_factory=list)
    ic_rejection_threshold: Any = 0.3

    @field_validator("ic_flags_to_reject", mode="before")
    @classmethod
    def _list_or_empty(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []


class ICLabelStep(StepConfig):
    value: ICLabelValue = Field(default_factory=ICLabelValue)


class ComponentRejectionValue(ICLabelValue):
    ic_rejection_overrides: Dict[str, Any] = Field(default_factory=dict)
    psd_fmax: Any = None

    @field_validator("ic_rejection_overrides", mode="before")
    @classmethod
    def _dict_or_empty(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}


class ComponentRejectionStep(StepConfig):
    method: Any = "iclabel"
    value: ComponentRejectionValue = Field(default_factory=ComponentRejectionValue)


class EpochValue(_Section):
    tmin: Any = None
    tmax: Any = None


class BaselineWindow(_Section):
    enabled: bool = False
    window: List[Any] = Field(default_factory=lambda: [None, 0])

    @field_validator("window", mode="before")
    @classmethod
    def _window_or_default(cls, v: Any) -> Any:
        return v if isinstance(v, list) else [None, 0]


class VoltThreshold(_Section):
    eeg: Any = None


class ThresholdRejection(_Section):
    enabled: bool = False
    volt_threshold: VoltThreshold = Field(default_factory=VoltThreshold)

    @field_validator("volt_threshold", mode="before")
    @classmethod
    def _scalar_as_eeg(cls, v: Any) -> Any:
        # the pipeline also accepts a bare number meaning the EEG threshold
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return {"eeg": v}
        return v


class EpochSettings(_Section):
    enabled: bool = False
    value: EpochValue = Field(default_factory=EpochValue)
    event_id: Any = None
    remove_baseline: BaselineWindow = Field(default_factory=BaselineWindow)
    threshold_rejection: ThresholdRejection = Field(default_factory=ThresholdRejection)


STEP_MODELS: Dict[str, Type[_Section]] = {
    "resample_step": ResampleStep,
    "filtering": FilteringStep,
    "drop_outerlayer": ChannelListStep,
    "eog_step": ChannelListStep,
    "trim_step": TrimStep,
    "crop_step": CropStep,
    "reference_step": ReferenceStep,
    "montage": MontageStep,
    "ICA": ICAStep,
    "ICLabel": ICLabelStep,
    "component_rejection": ComponentRejectionStep,
    "epoch_settings": EpochSettings,
}


def _in_source_order(dumped: Dict[str, Any], raw: Any) -> Dict[str, Any]:
    # keys written in the file keep their position, defaults follow
    if not isinstance(raw, dict):
        return dumped
    ordered = {key: dumped[key] for key in raw if key in dumped}
    ordered.update((key, value) for key, value in dumped.items() if key not in ordered)
    for key, value in ordered.items():
        if isinstance(value, dict):
            ordered[key] = _in_source_order(value, raw.get(key))
    return ordered


def expand_step(step_key: str, raw: Any) -> Optional[Dict[str, Any]]:
    """Rebuild ``raw`` into the canonical shape of ``step_key``.

    Returns None for step keys without a model; callers pass those through
    unchanged. Keys present in ``raw`` keep their order.

    Raises
    ------
    pydantic.ValidationError
        If ``raw`` cannot be coerced into the step shape.
    """
    model = STEP_MODELS.get(step_key)
    if model is None:
        return None
    return _in_source_order(model.model_validate(raw).model_dump(), raw)
