"""Unit tests for copy-on-write configuration edits."""

import copy

from autoclean_wizard.core.mutation import (
    apply_change,
    get_first_task_name,
    rename_task,
    sanitize_task_name,
)

SETTINGS = "tasks.RestingState.settings"


class TestApplyChange:
    """Test path-based edits."""

    def test_input_tree_is_not_mutated(self, resting_tree):
        """Editing returns a new tree and leaves the original untouched."""
        snapshot = copy.deepcopy(resting_tree)

        updated = apply_change(resting_tree, f"{SETTINGS}.resample_step.value", 500)

        assert resting_tree == snapshot
        assert updated is not resting_tree
        assert updated["tasks"]["RestingState"]["settings"]["resample_step"]["value"] == 500

    def test_untouched_branches_are_shared(self, resting_tree):
        updated = apply_change(resting_tree, f"{SETTINGS}.resample_step.value", 500)

        old_settings = resting_tree["tasks"]["RestingState"]["settings"]
        new_settings = updated["tasks"]["RestingState"]["settings"]
        assert new_settings["filtering"] is old_settings["filtering"]
        assert new_settings["resample_step"] is not old_settings["resample_step"]

    def test_list_index_assignment(self, resting_tree):
        updated = apply_change(
            resting_tree, f"{SETTINGS}.epoch_settings.remove_baseline.window.0", -0.2
        )

        window = updated["tasks"]["RestingState"]["settings"]["epoch_settings"]["remove_baseline"]["window"]
        assert window == [-0.2, 0]
        assert resting_tree["tasks"]["RestingState"]["settings"]["epoch_settings"]["remove_baseline"]["window"] == [None, 0]

    def test_list_index_out_of_bounds_returns_original(self, resting_tree):
        updated = apply_change(
            resting_tree, f"{SETTINGS}.epoch_settings.remove_baseline.window.5", 1
        )
        assert updated is resting_tree

    def test_non_numeric_list_index_returns_original(self, resting_tree):
        updated = apply_change(
            resting_tree, f"{SETTINGS}.epoch_settings.remove_baseline.window.first", 1
        )
        assert updated is resting_tree

    def test_unicode_digit_index_returns_original(self, resting_tree):
        updated = apply_change(
            resting_tree, f"{SETTINGS}.epoch_settings.remove_baseline.window.²", 1
        )
        assert updated is resting_tree

    def test_new_dict_key_is_created(self, resting_tree):
        updated = apply_change(resting_tree, f"{SETTINGS}.ICA.value.fit_params.ortho", False)
        fit_params = updated["tasks"]["RestingState"]["settings"]["ICA"]["value"]["fit_params"]
        assert fit_params == {"extended": True, "ortho": False}

    def test_whitelisted_containers_are_materialized(self, resting_tree):
        """Missing crop values and baseline windows are created on demand."""
        tree = copy.deepcopy(resting_tree)
        settings = tree["tasks"]["RestingState"]["settings"]
        settings["crop_step"]["value"] = None
        del settings["epoch_settings"]["remove_baseline"]["window"]

        updated = apply_change(tree, f"{SETTINGS}.crop_step.value.start", 5)
        updated = apply_change(updated, f"{SETTINGS}.epoch_settings.remove_baseline.window.1", 0.5)

        new_settings = updated["tasks"]["RestingState"]["settings"]
        assert new_settings["crop_step"]["value"] == {"start": 5}
        assert new_settings["epoch_settings"]["remove_baseline"]["window"] == [None, 0.5]

    def test_volt_threshold_is_materialized(self, resting_tree):
        tree = copy.deepcopy(resting_tree)
        tree["tasks"]["RestingState"]["settings"]["epoch_settings"]["threshold_rejection"]["volt_threshold"] = None

        updated = apply_change(
            tree, f"{SETTINGS}.epoch_settings.threshold_rejection.volt_threshold.eeg", "150e-6"
        )

        rejection = updated["tasks"]["RestingState"]["settings"]["epoch_settings"]["threshold_rejection"]
        assert rejection["volt_threshold"] == {"eeg": "150e-6"}

    def test_other_missing_segments_are_rejected(self, resting_tree):
        updated = apply_change(resting_tree, f"{SETTINGS}.unknown_step.value", 1)
        assert updated is resting_tree

    def test_empty_segment_is_rejected(self, resting_tree):
        assert apply_change(resting_tree, "tasks..settings", 1) is resting_tree
        assert apply_change(resting_tree, "", 1) is resting_tree

    def test_scalar_in_the_middle_of_path_is_rejected(self, resting_tree):
        updated = apply_change(resting_tree, f"{SETTINGS}.resample_step.value.rate", 1)
        assert updated is resting_tree


class TestRenameTask:
    """Test task renames through mne_task edits."""

    def test_mne_task_edit_rekeys_task(self, resting_tree):
        updated = apply_change(resting_tree, "tasks.RestingState.mne_task", "My Task!")

        assert list(updated["tasks"]) == ["My_Task"]
        assert updated["tasks"]["My_Task"]["mne_task"] == "My Task!"
        assert list(resting_tree["tasks"]) == ["RestingState"]

    def test_same_key_only_updates_field(self, resting_tree):
        updated = rename_task(resting_tree, "RestingState", "Resting State")
        updated = rename_task(updated, "Resting_State", "Resting_State")

        assert list(updated["tasks"]) == ["Resting_State"]
        assert updated["tasks"]["Resting_State"]["mne_task"] == "Resting_State"

    def test_name_that_sanitizes_to_nothing_keeps_key(self, resting_tree):
        updated = rename_task(resting_tree, "RestingState", "!!!")

        assert list(updated["tasks"]) == ["RestingState"]
        assert updated["tasks"]["RestingState"]["mne_task"] == "!!!"

    def test_rename_keeps_position(self, resting_tree, event_tree):
        tree = {"tasks": {**resting_tree["tasks"], **event_tree["tasks"]}}

        updated = rename_task(tree, "EventBased", "Oddball")

        assert list(updated["tasks"]) == ["RestingState", "Oddball"]

    def test_collision_returns_original(self, resting_tree, event_tree):
        tree = {"tasks": {**resting_tree["tasks"], **event_tree["tasks"]}}

        assert rename_task(tree, "EventBased", "Resting State") is not tree
        assert rename_task(tree, "EventBased", "RestingState") is tree

    def test_unknown_task_returns_original(self, resting_tree):
        assert rename_task(resting_tree, "Missing", "Other") is resting_tree

    def test_non_string_name_returns_original(self, resting_tree):
        assert rename_task(resting_tree, "RestingState", 42) is resting_tree


class TestTaskNames:
    def test_sanitize_task_name(self):
        assert sanitize_task_name("My Task-2!") == "My_Task2"
        assert sanitize_task_name("resting  eyes\topen") == "resting_eyes_open"
        assert sanitize_task_name("###") == ""

    def test_get_first_task_name(self, resting_tree):
        assert get_first_task_name(resting_tree["tasks"]) == "RestingState"
        assert get_first_task_name({}) is None
        assert get_first_task_name(None) is None
