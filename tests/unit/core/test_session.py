"""Unit tests for the wizard session."""

import pytest

from autoclean_wizard.core.generation import GenerationError
from autoclean_wizard.core.session import (
    FIX_ERRORS_PREVIEW,
    NOT_PYTHON_FILE_MESSAGE,
    UNPARSABLE_FILE_MESSAGE,
    TaskFileDownload,
    WizardSession,
)


class TestStartFromTemplate:
    def test_default_template_from_settings(self, session):
        assert session.task_key == "RestingState"
        assert session.errors == {}

    @pytest.mark.parametrize(
        "template_key, task_key",
        [("EventBased", "EventBased"), ("Custom", "CustomTask"), ("Unknown", "CustomTask")],
    )
    def test_explicit_template(self, wizard_config, template_key, task_key):
        session = WizardSession(wizard_config)
        session.start_from_template(template_key)
        assert list(session.tree["tasks"]) == [task_key]

    def test_templates_are_independent_copies(self, wizard_config):
        first = WizardSession(wizard_config)
        second = WizardSession(wizard_config)
        first.start_from_template("RestingState")
        second.start_from_template("RestingState")

        first.handle_input_change("tasks.RestingState.settings.filtering.value.l_freq", 0.5)

        assert second.tree["tasks"]["RestingState"]["settings"]["filtering"]["value"]["l_freq"] == 1


class TestEditing:
    def test_required_field_live_validation(self, session):
        path = "tasks.RestingState.description"

        session.handle_input_change(path, "")
        assert session.errors[path] == "This field is required."

        session.handle_input_change(path, "Eyes open rest")
        assert path not in session.errors
        assert session.tree["tasks"]["RestingState"]["description"] == "Eyes open rest"

    def test_edit_clears_error_for_that_path_only(self, session):
        session.errors = {"a.b": "old", "c.d": "other"}
        session.handle_input_change("a.b", 1)
        assert session.errors == {"c.d": "other"}

    def test_rename_task(self, session):
        session.rename_task("Eyes Open")

        assert session.task_key == "Eyes_Open"
        assert session.tree["tasks"]["Eyes_Open"]["mne_task"] == "Eyes Open"

    def test_rename_without_task(self, wizard_config):
        session = WizardSession(wizard_config)
        session.rename_task("Anything")
        assert session.tree == {"tasks": {}}


class TestPreviewAndDownload:
    def test_preview(self, session):
        preview = session.preview()

        assert preview.startswith("from autoclean.core.task import Task")
        assert session.python_preview == preview

    def test_preview_with_validation_errors(self, session):
        session.handle_input_change("tasks.RestingState.settings.resample_step.value", -5)

        assert session.preview() == FIX_ERRORS_PREVIEW
        assert "tasks.RestingState.settings.resample_step.value" in session.errors

    def test_preview_generation_failure(self, session):
        session.handle_input_change("tasks.RestingState.settings.extra_step", object())

        preview = session.preview()

        assert preview.startswith("Failed to generate Python script:")
        assert session.errors["pythonGeneration"] == preview

    def test_build_download(self, session):
        download = session.build_download()

        assert isinstance(download, TaskFileDownload)
        assert download.filename == "restingstate.py"
        assert download.mime_type == "text/x-python"
        assert "class RestingState(Task):" in download.content

    def test_download_refused_with_validation_errors(self, session):
        session.handle_input_change("tasks.RestingState.settings.montage.value", "unknown")

        with pytest.raises(ValueError, match="fix the validation errors"):
            session.build_download()

    def test_download_generation_failure(self, session):
        session.handle_input_change("tasks.RestingState.settings.extra_step", object())

        with pytest.raises(GenerationError):
            session.build_download()
        assert session.errors["fileGeneration"].startswith("Failed to generate Python file:")

    def test_save_download_to_output_dir(self, session, wizard_config):
        output_path = session.save_download()

        assert output_path == wizard_config["output_dir"] / "restingstate.py"
        assert output_path.read_text(encoding="utf-8") == session.python_preview

    def test_save_download_to_directory(self, session, tmp_path):
        output_path = session.save_download(tmp_path / "elsewhere")
        assert output_path.exists()


class TestLoading:
    def test_non_python_upload_is_rejected(self, session):
        tree = session.tree

        assert not session.load_upload("task.txt", "config = {}")
        assert session.load_error == NOT_PYTHON_FILE_MESSAGE
        assert session.tree is tree

    def test_unparsable_upload_keeps_tree(self, session):
        tree = session.tree

        assert not session.load_upload("task.py", "config = {'a': {'b': 1}\n\nclass X(Task):\n")
        assert session.load_error == UNPARSABLE_FILE_MESSAGE
        assert session.tree is tree

    def test_upload_round_trip(self, wizard_config):
        source = WizardSession(wizard_config)
        source.start_from_template("EventBased")
        content = source.build_download().content

        target = WizardSession(wizard_config)
        target.start_from_template("RestingState")
        target.errors = {"stale": "error"}

        assert target.load_upload("eventbased.py", content)
        assert target.task_key == "EventBased"
        assert target.errors == {}
        assert target.load_error == ""
        assert target.preview() == content

    def test_load_file(self, session, tmp_path):
        path = session.save_download(tmp_path)

        fresh = WizardSession(session.wizard_config)
        assert fresh.load_file(path)
        assert fresh.task_key == "RestingState"

    def test_load_file_rejects_extension(self, session, tmp_path):
        path = tmp_path / "task.yaml"
        path.write_text("config = {}", encoding="utf-8")

        assert not session.load_file(path)
        assert session.load_error == NOT_PYTHON_FILE_MESSAGE

    def test_load_missing_file(self, session, tmp_path):
        assert not session.load_file(tmp_path / "missing.py")
        assert session.load_error.startswith("Failed to process configuration file")
