"""Stateful wizard session.

A ``WizardSession`` owns the configuration being edited and the error state
shown next to it, and wires together the mutation, validation, generation and
parsing functions the way the wizard front end uses them.

Examples
--------
>>> session = WizardSession()
>>> session.start_from_template("EventBased")
>>> session.handle_input_change("tasks.EventBased.settings.resample_step.value", 500)
>>> download = session.build_download()
>>> download.filename
'eventbased.py'
"""

from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Union

from autoclean_wizard.core.generation import GenerationError, generate_task_script, task_file_name
from autoclean_wizard.core.mutation import apply_change, get_first_task_name
from autoclean_wizard.core.parser import parse_python_task_file, validate_parsed_config
from autoclean_wizard.core.validation import REQUIRED_FIELD_MESSAGE, validate_config
from autoclean_wizard.templates.config_templates import CUSTOM_TASK_NAME, TASK_TEMPLATES, get_task_config
from autoclean_wizard.utils.config import load_wizard_config
from autoclean_wizard.utils.logging import message

__all__ = ["WizardSession", "TaskFileDownload"]

PYTHON_MIME_TYPE = "text/x-python"
REQUIRED_FIELD_SUFFIXES = (".mne_task", ".description")
FIX_ERRORS_PREVIEW = "Please fix the validation errors before previewing."
NOT_PYTHON_FILE_MESSAGE = "Please select a Python configuration file (.py)"
UNPARSABLE_FILE_MESSAGE = (
    "Unable to parse configuration file. Please ensure it's a valid Autoclean EEG task file."
)


class TaskFileDownload(NamedTuple):
    """A generated task file, ready to be saved or served."""

    filename: str
    mime_type: str
    content: str


class WizardSession:
    """Editing session for a single task configuration.

    Parameters
    ----------
    wizard_config : dict, optional
        Settings as returned by ``load_wizard_config``. Loaded from the default
        location when omitted.

    Attributes
    ----------
    tree : dict
        Current configuration, ``{"tasks": {...}}``. Replaced, never mutated.
    errors : dict
        Path-keyed error messages, plus ``pythonGeneration`` /
        ``fileGeneration`` when rendering failed.
    python_preview : str
        Last preview text (generated source or an explanatory message).
    load_error : str
        Message from the last failed upload, empty otherwise.
    """

    def __init__(self, wizard_config: Optional[Dict[str, Any]] = None):
        self.wizard_config = wizard_config if wizard_config is not None else load_wizard_config()
        self.tree: Dict[str, Any] = {"tasks": {}}
        self.errors: Dict[str, str] = {}
        self.python_preview = ""
        self.load_error = ""

    @property
    def task_key(self) -> Optional[str]:
        return get_first_task_name(self.tree.get("tasks"))

    @property
    def fallback_class_name(self) -> str:
        return self.wizard_config.get("fallback_class_name") or CUSTOM_TASK_NAME

    # ------------------------------------------------------------------
    # Starting points
    # ------------------------------------------------------------------

    def start_from_template(self, template_key: Optional[str] = None) -> None:
        """Replace the configuration with a built-in template.

        ``template_key`` is a key of ``TASK_TEMPLATES`` or ``"Custom"``;
        None uses the ``default_template`` setting.
        """
        if template_key is None:
            template_key = self.wizard_config.get("default_template") or "Custom"

        if template_key in TASK_TEMPLATES:
            task_key = template_key
            task = get_task_config(template_key)
        else:
            if template_key != "Custom":
                message("warning", f"Unknown template {template_key}, starting from a custom task")
            task_key = CUSTOM_TASK_NAME
            task = get_task_config(None)

        self.tree = {"tasks": {task_key: task}}
        self.errors = {}
        self.load_error = ""
        message("header", f"Started {task_key} configuration")

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def handle_input_change(self, path: str, value: Any) -> None:
        """Apply one field edit and update the live error for that field."""
        self.tree = apply_change(self.tree, path, value)

        self.errors.pop(path, None)
        if path.endswith(REQUIRED_FIELD_SUFFIXES) and not value:
            self.errors[path] = REQUIRED_FIELD_MESSAGE

    def rename_task(self, new_name: str) -> None:
        """Rename the current task (``mne_task`` and its key)."""
        task_key = self.task_key
        if task_key is None:
            message("error", "No task to rename")
            return
        self.handle_input_change(f"tasks.{task_key}.mne_task", new_name)

    def validate(self) -> Dict[str, str]:
        self.errors = validate_config(self.tree)
        return self.errors

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def preview(self) -> str:
        """Validate, then render the task file into ``python_preview``."""
        if self.validate():
            self.python_preview = FIX_ERRORS_PREVIEW
            return self.python_preview

        try:
            self.python_preview = generate_task_script(
                self.tree, fallback_class_name=self.fallback_class_name
            )
        except GenerationError as e:
            error_text = f"Failed to generate Python script: {e}"
            message("error", error_text)
            self.python_preview = error_text
            self.errors["pythonGeneration"] = error_text
        return self.python_preview

    def build_download(self) -> TaskFileDownload:
        """Validate and render the task file for download.

        Raises
        ------
        ValueError
            If the configuration has validation errors.
        GenerationError
            If rendering fails; also recorded under ``errors["fileGeneration"]``.
        """
        if self.validate():
            raise ValueError(
                "Please fix the validation errors before downloading: "
                + ", ".join(f"{path}: {text}" for path, text in self.errors.items())
            )

        try:
            content = generate_task_script(self.tree, fallback_class_name=self.fallback_class_name)
        except GenerationError as e:
            self.errors["fileGeneration"] = f"Failed to generate Python file: {e}"
            message("error", self.errors["fileGeneration"])
            raise

        self.python_preview = content
        return TaskFileDownload(task_file_name(self.tree), PYTHON_MIME_TYPE, content)

    def save_download(self, directory: Optional[Union[str, Path]] = None) -> Path:
        """Write the task file into ``directory`` (default: ``output_dir`` setting or cwd)."""
        download = self.build_download()
        if directory is None:
            directory = self.wizard_config.get("output_dir") or Path.cwd()
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        output_path = directory / download.filename
        output_path.write_text(download.content, encoding="utf-8")
        message("success", f"✓ Task file written to {output_path}")
        return output_path

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_upload(self, filename: str, content: str) -> bool:
        """Load a task file's text as the new configuration.

        The configuration is replaced only when the file parses and passes
        ``validate_parsed_config``; otherwise ``load_error`` explains why and
        the current configuration is kept.

        Returns
        -------
        bool
            True when the configuration was loaded.
        """
        if not filename.endswith(".py"):
            self.load_error = NOT_PYTHON_FILE_MESSAGE
            message("error", f"Rejected {filename}: not a Python file")
            return False

        loaded = parse_python_task_file(content)
        if loaded is None:
            self.load_error = UNPARSABLE_FILE_MESSAGE
            return False

        is_valid, reasons = validate_parsed_config(loaded)
        if not is_valid:
            self.load_error = f"Invalid configuration: {', '.join(reasons)}"
            message("error", self.load_error)
            return False

        self.tree = loaded
        self.errors = {}
        self.load_error = ""
        message("success", f"✓ Loaded {self.task_key} from {filename}")
        return True

    def load_file(self, path: Union[str, Path]) -> bool:
        """Read a task file from disk and load it, see ``load_upload``."""
        path = Path(path)
        if path.suffix != ".py":
            self.load_error = NOT_PYTHON_FILE_MESSAGE
            message("error", f"Rejected {path}: not a Python file")
            return False

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.load_error = f"Failed to process configuration file: {e}"
            message("error", self.load_error)
            return False

        return self.load_upload(path.name, content)
