# src/autoclean_wizard/utils/config.py
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import platformdirs
import yaml
from schema import And, Optional as SchemaOptional, Or, Schema, Use

from .logging import message

CONFIG_ENV_VAR = "AUTOCLEAN_WIZARD_CONFIG"

DEFAULT_WIZARD_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    "output_dir": None,
    "default_template": "RestingState",
    "fallback_class_name": "CustomTask",
}

WIZARD_CONFIG_SCHEMA = Schema(
    {
        SchemaOptional("log_level"): Or(str, int, bool),
        SchemaOptional("output_dir"): Or(None, And(str, Use(Path))),
        SchemaOptional("default_template"): And(str, len),
        SchemaOptional("fallback_class_name"): And(
            str, lambda s: s.isidentifier(), error="fallback_class_name must be a valid identifier"
        ),
    }
)


def default_config_path() -> Path:
    """Location of the wizard settings file.

    ``AUTOCLEAN_WIZARD_CONFIG`` takes precedence over the per-user config
    directory resolved by platformdirs.
    """
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path(platformdirs.user_config_dir("autoclean-wizard", "autoclean")) / "wizard.yaml"


def load_wizard_config(config_file: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load and validate the wizard settings file.

    Parameters
    ----------
    config_file : str or Path, optional
        Path to a YAML settings file. Defaults to ``default_config_path()``.

    Returns
    -------
    wizard_config : dict
        Defaults overlaid with the validated file contents. A missing file
        yields the defaults.

    Raises
    ------
    yaml.YAMLError
        If the file is not valid YAML.
    schema.SchemaError
        If the file contents do not match the expected settings.
    """
    config_path = Path(config_file) if config_file is not None else default_config_path()

    wizard_config = dict(DEFAULT_WIZARD_CONFIG)
    if not config_path.exists():
        message("debug", f"No wizard config at {config_path}, using defaults")
        return wizard_config

    message("info", f"Loading wizard config: {config_path}")
    with open(config_path, "r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}

    wizard_config.update(WIZARD_CONFIG_SCHEMA.validate(loaded))
    return wizard_config
